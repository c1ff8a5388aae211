"""Update-versions command: apply a release plan to internal ranges."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from tandem.commands.base import CommandContext, SyncCommand
from tandem.errors import TandemError
from tandem.versioning import update_package_versions

if TYPE_CHECKING:
    from tandem.workspace.workspace import Workspace


@dataclass
class UpdateVersionsResult:
    """Result of update-versions command.

    Attributes:
        edited: Manifests whose ranges changed, relative to the workspace root.
        written: Whether the manifests were saved.
    """

    edited: list[str] = field(default_factory=list)
    written: bool = False


@dataclass
class UpdateVersionsOptions:
    """Options for update-versions command."""

    versions: dict[str, str] = field(default_factory=dict)


def parse_version_specs(specs: list[str]) -> dict[str, str]:
    """Parse ``name@version`` arguments.

    The last ``@`` separates the version so scoped names work:
    ``@acme/core@1.2.0`` -> ``{"@acme/core": "1.2.0"}``.

    Raises:
        TandemError: On an argument without a name or version.
    """
    versions: dict[str, str] = {}
    for spec in specs:
        name, sep, version = spec.rpartition("@")
        if not sep or not name or not version:
            raise TandemError(f"Invalid version spec '{spec}', expected NAME@VERSION")
        versions[name] = version
    return versions


def load_version_file(path: Path) -> dict[str, str]:
    """Read a flat JSON object of package name to version."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise TandemError(f"Cannot read version map {path}: {e}") from e
    if not isinstance(data, Mapping) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in data.items()
    ):
        raise TandemError(f"Version map {path} must be a flat object of strings")
    return dict(data)


class UpdateVersionsCommand(SyncCommand[UpdateVersionsResult]):
    """Rewrite internal dependency ranges and save the edited manifests."""

    def __init__(self, context: CommandContext, options: UpdateVersionsOptions) -> None:
        super().__init__(context)
        self.options = options

    def execute(self) -> UpdateVersionsResult:
        edited = update_package_versions(
            self.options.versions,
            self.workspace,
            on_diagnostic=self.on_diagnostic,
        )

        by_path = {pkg.manifest_path: pkg for pkg in self.workspace.packages.values()}
        if not self.context.dry_run:
            for path in sorted(edited):
                by_path[path].manifest.write()

        return UpdateVersionsResult(
            edited=sorted(self.workspace.relative_path(by_path[p]) for p in edited),
            written=not self.context.dry_run,
        )


def update_versions(
    workspace: Workspace,
    versions: dict[str, str],
    *,
    dry_run: bool = False,
) -> UpdateVersionsResult:
    """Convenience function to propagate ``versions`` and save manifests."""
    context = CommandContext(workspace=workspace, dry_run=dry_run)
    return UpdateVersionsCommand(context, UpdateVersionsOptions(versions=versions)).execute()
