"""Dependency graph between workspace packages."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from tandem.diagnostics import Diagnostic, DiagnosticKind, DiagnosticSink, log_diagnostic
from tandem.errors import ConfigurationError, PackageNotFoundError
from tandem.versioning.ranges import admits
from tandem.workspace.manifest import DependencyType
from tandem.workspace.package import Package


@dataclass
class GraphEntry:
    """Direct edges of one package.

    Attributes:
        package: The package.
        dependencies: Internal packages it depends on.
        dependents: Internal packages depending on it.
    """

    package: Package
    dependencies: set[Package] = field(default_factory=set)
    dependents: set[Package] = field(default_factory=set)


class DependencyGraph:
    """Direct dependency edges among a fixed list of packages.

    A dependency is internal when its name is one of the packages given to the
    constructor. Only internal edges are recorded, in both directions. The
    graph is read-only once built; rebuild it when the package list changes.
    """

    def __init__(
        self,
        packages: Iterable[Package],
        *,
        on_diagnostic: DiagnosticSink | None = None,
    ) -> None:
        """Build the graph.

        Args:
            packages: All workspace packages.
            on_diagnostic: Receives validity diagnostics. Defaults to logging.

        Raises:
            ConfigurationError: If two packages share a name.
        """
        self._on_diagnostic = on_diagnostic if on_diagnostic is not None else log_diagnostic
        self._entries: dict[str, GraphEntry] = {}

        for pkg in packages:
            if pkg.name in self._entries:
                other = self._entries[pkg.name].package
                raise ConfigurationError(
                    f"Duplicate package name '{pkg.name}' ({other.path} and {pkg.path})"
                )
            self._entries[pkg.name] = GraphEntry(package=pkg)

        for entry in self._entries.values():
            for dep_type in DependencyType:
                for dep_name in entry.package.manifest.get_dependencies(dep_type):
                    target = self._entries.get(dep_name)
                    if target is None:
                        continue
                    entry.dependencies.add(target.package)
                    target.dependents.add(entry.package)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    @property
    def packages(self) -> list[Package]:
        """Packages in construction order."""
        return [entry.package for entry in self._entries.values()]

    def entries(self) -> Iterator[tuple[Package, GraphEntry]]:
        """Iterate ``(package, entry)`` pairs in construction order."""
        for entry in self._entries.values():
            yield entry.package, entry

    def get_by_name(self, name: str) -> GraphEntry | None:
        """Entry for ``name``, or None when it is not an internal package."""
        return self._entries.get(name)

    def _require(self, name: str) -> GraphEntry:
        entry = self._entries.get(name)
        if entry is None:
            raise PackageNotFoundError(name, list(self._entries))
        return entry

    def get_dependencies(self, name: str) -> list[Package]:
        """Direct internal dependencies of ``name``, sorted by name."""
        return sorted(self._require(name).dependencies, key=lambda p: p.name)

    def get_dependents(self, name: str) -> list[Package]:
        """Direct internal dependents of ``name``, sorted by name."""
        return sorted(self._require(name).dependents, key=lambda p: p.name)

    def get_transitive_dependents(self, name: str) -> list[Package]:
        """Every package that depends on ``name`` directly or indirectly."""
        seen: dict[str, Package] = {}
        stack = [name]
        while stack:
            current = stack.pop()
            for dependent in self._require(current).dependents:
                if dependent.name != name and dependent.name not in seen:
                    seen[dependent.name] = dependent
                    stack.append(dependent.name)
        return sorted(seen.values(), key=lambda p: p.name)

    def is_valid(self, on_diagnostic: DiagnosticSink | None = None) -> bool:
        """Check every internal range against the target's current version.

        Emits one diagnostic per edge whose declared range does not admit the
        depended-upon package's version. Never raises.

        Args:
            on_diagnostic: Sink for this check, overriding the graph's own.
        """
        emit = on_diagnostic if on_diagnostic is not None else self._on_diagnostic
        valid = True
        for pkg, entry in self.entries():
            for dep in sorted(entry.dependencies, key=lambda p: p.name):
                for dep_type in pkg.manifest.get_dependency_types(dep.name):
                    range_ = pkg.manifest.get_dependencies(dep_type)[dep.name]
                    if admits(dep.version, range_):
                        continue
                    # one diagnostic per edge, even when declared in several groups
                    valid = False
                    emit(
                        Diagnostic(
                            kind=DiagnosticKind.GRAPH_VALIDITY,
                            message=(
                                f"{pkg.name} depends on {dep.name}@{range_} "
                                f"({dep_type.value}) but the workspace has {dep.name}@{dep.version}"
                            ),
                            packages=(pkg.name, dep.name),
                        )
                    )
                    break
        return valid
