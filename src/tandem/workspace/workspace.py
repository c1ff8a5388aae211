"""Workspace: config, packages and their dependency graph."""

from __future__ import annotations

from pathlib import Path

from tandem.config import TandemConfig, find_config, load_config
from tandem.diagnostics import DiagnosticSink
from tandem.errors import PackageNotFoundError
from tandem.workspace.discovery import discover_packages
from tandem.workspace.graph import DependencyGraph
from tandem.workspace.manifest import MANIFEST_FILENAME, Manifest
from tandem.workspace.package import Package


class Workspace:
    """A monorepo rooted at the directory holding tandem.yaml.

    Attributes:
        root: Workspace root directory.
        config: Parsed tandem.yaml.
        packages: Packages keyed by name, in discovery order.
        graph: Dependency graph over all packages.
        root_manifest: Root package.json, if the root has one.
    """

    def __init__(
        self,
        root: Path,
        config: TandemConfig,
        packages: list[Package],
        *,
        root_manifest: Manifest | None = None,
        on_diagnostic: DiagnosticSink | None = None,
    ) -> None:
        self.root = root
        self.config = config
        self.root_manifest = root_manifest
        self.on_diagnostic = on_diagnostic
        # graph construction rejects duplicate names before we index them
        self.graph = DependencyGraph(packages, on_diagnostic=on_diagnostic)
        self.packages: dict[str, Package] = {pkg.name: pkg for pkg in packages}

    @classmethod
    def discover(
        cls,
        path: Path | None = None,
        *,
        on_diagnostic: DiagnosticSink | None = None,
    ) -> Workspace:
        """Load the workspace containing ``path`` (default: cwd).

        Raises:
            WorkspaceNotFoundError: No tandem.yaml upwards of ``path``.
            ConfigurationError: Invalid config or duplicate package names.
            ManifestError: A package.json could not be read.
        """
        config_path = find_config(path)
        root = config_path.parent
        config = load_config(config_path)
        packages = discover_packages(root, config.packages, config.ignore)

        root_manifest = None
        if (root / MANIFEST_FILENAME).is_file():
            root_manifest = Manifest.load(root / MANIFEST_FILENAME)

        return cls(
            root,
            config,
            packages,
            root_manifest=root_manifest,
            on_diagnostic=on_diagnostic,
        )

    @property
    def name(self) -> str:
        return self.config.name

    def get_package(self, name: str) -> Package:
        """Package named ``name``.

        Raises:
            PackageNotFoundError: If there is no such package.
        """
        try:
            return self.packages[name]
        except KeyError:
            raise PackageNotFoundError(name, list(self.packages)) from None

    def get_affected_packages(self, packages: list[Package]) -> list[Package]:
        """``packages`` plus everything that transitively depends on them."""
        affected: dict[str, Package] = {p.name: p for p in packages}
        for pkg in packages:
            for dependent in self.graph.get_transitive_dependents(pkg.name):
                affected.setdefault(dependent.name, dependent)
        return [p for p in self.packages.values() if p.name in affected]

    def relative_path(self, package: Package) -> str:
        """Package directory relative to the root, posix style."""
        return package.path.relative_to(self.root).as_posix()
