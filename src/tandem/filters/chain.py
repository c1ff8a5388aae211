"""Filter chain composition."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tandem.filters.ignore import filter_by_ignore
from tandem.filters.path import filter_by_path
from tandem.filters.scope import filter_by_scope
from tandem.workspace.package import Package

if TYPE_CHECKING:
    from tandem.workspace.workspace import Workspace


def apply_filters(
    packages: list[Package],
    workspace: Workspace,
    *,
    scope: str | None = None,
    ignore: list[str] | None = None,
    only_fs: str | None = None,
    ignore_fs: str | None = None,
    include_dependents: bool = False,
) -> list[Package]:
    """Apply name and path filters to a package list.

    Filters are applied in order:
    1. Scope pattern matching
    2. Ignore pattern exclusion
    3. Path inclusion/exclusion
    4. Optionally, add transitive dependents of what is left

    Args:
        packages: List of packages to filter.
        workspace: Workspace the packages belong to.
        scope: Comma-separated names or glob patterns.
        ignore: Name patterns to exclude.
        only_fs: Path glob to keep.
        ignore_fs: Path glob to drop.
        include_dependents: Include packages depending on the selection.

    Returns:
        Filtered list of packages, in workspace order.
    """
    result = filter_by_scope(packages, scope)
    result = filter_by_ignore(result, ignore)
    result = filter_by_path(result, workspace.root, only_fs=only_fs, ignore_fs=ignore_fs)

    if include_dependents:
        result = workspace.get_affected_packages(result)

    return result
