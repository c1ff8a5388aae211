"""List command implementation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from tandem.commands.base import CommandContext, SyncCommand

if TYPE_CHECKING:
    from tandem.workspace import Package
    from tandem.workspace.workspace import Workspace


class ListFormat(Enum):
    """Output format for list command."""

    TABLE = "table"
    JSON = "json"
    GRAPH = "graph"


@dataclass
class PackageInfo:
    """Information about a package for display."""

    name: str
    version: str
    path: str
    description: str | None
    dependencies: list[str]
    dependents: list[str]


@dataclass
class ListResult:
    """Result of list command."""

    packages: list[PackageInfo]


@dataclass
class ListOptions:
    """Options for list command."""

    scope: str | None = None
    ignore: list[str] | None = None
    only_fs: str | None = None
    ignore_fs: str | None = None
    format: ListFormat = ListFormat.TABLE
    include_dependents: bool = False


class ListCommand(SyncCommand[ListResult]):
    """List packages in the workspace."""

    def __init__(self, context: CommandContext, options: ListOptions | None = None) -> None:
        super().__init__(context)
        self.options = options or ListOptions()

    def get_packages(self) -> list[Package]:
        """Get packages to list."""
        from tandem.filters import apply_filters

        return apply_filters(
            list(self.workspace.packages.values()),
            self.workspace,
            scope=self.options.scope,
            ignore=self.options.ignore,
            only_fs=self.options.only_fs,
            ignore_fs=self.options.ignore_fs,
            include_dependents=self.options.include_dependents,
        )

    def execute(self) -> ListResult:
        """Execute the list command."""
        graph = self.workspace.graph

        infos = [
            PackageInfo(
                name=pkg.name,
                version=pkg.version,
                path=self.workspace.relative_path(pkg),
                description=pkg.description,
                dependencies=[d.name for d in graph.get_dependencies(pkg.name)],
                dependents=[d.name for d in graph.get_dependents(pkg.name)],
            )
            for pkg in self.get_packages()
        ]
        infos.sort(key=lambda p: p.name)

        return ListResult(packages=infos)


def list_packages(
    workspace: Workspace,
    *,
    scope: str | None = None,
    ignore: list[str] | None = None,
    only_fs: str | None = None,
    ignore_fs: str | None = None,
    format: ListFormat = ListFormat.TABLE,
) -> ListResult:
    """Convenience function to list packages.

    Args:
        workspace: Workspace to list.
        scope: Package scope filter.
        ignore: Patterns to exclude.
        only_fs: Path glob to keep.
        ignore_fs: Path glob to drop.
        format: Output format.

    Returns:
        List result with package info, sorted by name.
    """
    context = CommandContext(workspace=workspace)
    options = ListOptions(
        scope=scope, ignore=ignore, only_fs=only_fs, ignore_fs=ignore_fs, format=format
    )
    return ListCommand(context, options).execute()
