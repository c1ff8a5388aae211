"""Filesystem-path based package filtering."""

from __future__ import annotations

import fnmatch
from pathlib import Path

from tandem.workspace.package import Package


def _match_parts(parts: list[str], segments: list[str]) -> bool:
    if not segments:
        return not parts
    head, *rest = segments
    if head == "**":
        return any(_match_parts(parts[i:], rest) for i in range(len(parts) + 1))
    return bool(parts) and fnmatch.fnmatchcase(parts[0], head) and _match_parts(parts[1:], rest)


def match_path(rel_path: str, pattern: str) -> bool:
    """Glob match of a root-relative posix path, one segment at a time.

    ``*`` stays within a directory name. A ``**`` segment matches any number
    of directories, none included.
    """
    pattern = pattern.strip().rstrip("/")
    return _match_parts(rel_path.split("/"), pattern.split("/"))


def filter_by_path(
    packages: list[Package],
    root: Path,
    *,
    only_fs: str | None = None,
    ignore_fs: str | None = None,
) -> list[Package]:
    """Filter packages by directory, relative to ``root``.

    Args:
        packages: Packages to filter.
        root: Workspace root the patterns are relative to.
        only_fs: Keep only packages whose path matches this glob.
        ignore_fs: Drop packages whose path matches this glob.
    """
    if not only_fs and not ignore_fs:
        return packages

    result = []
    for pkg in packages:
        rel = pkg.path.relative_to(root).as_posix()
        if only_fs and not match_path(rel, only_fs):
            continue
        if ignore_fs and match_path(rel, ignore_fs):
            continue
        result.append(pkg)
    return result
