"""Expand package globs into workspace packages."""

from __future__ import annotations

import fnmatch
from pathlib import Path

from tandem.workspace.manifest import MANIFEST_FILENAME
from tandem.workspace.package import Package


def _is_ignored(rel_path: str, ignore: list[str]) -> bool:
    return any(fnmatch.fnmatch(rel_path, pattern) for pattern in ignore)


def find_package_dirs(
    root: Path, patterns: list[str], ignore: list[str] | None = None
) -> list[Path]:
    """Directories matching ``patterns`` that contain a package.json.

    Args:
        root: Workspace root.
        patterns: Glob patterns relative to root (e.g. ``packages/*``).
        ignore: Glob patterns (relative paths) to exclude.

    Returns:
        Matching directories, sorted by relative path, without duplicates.
        The root itself is never a package.
    """
    ignore = ignore or []
    found: dict[str, Path] = {}

    for pattern in patterns:
        for candidate in root.glob(pattern):
            if not candidate.is_dir() or candidate == root:
                continue
            if not (candidate / MANIFEST_FILENAME).is_file():
                continue
            rel = candidate.relative_to(root).as_posix()
            if "node_modules" in candidate.relative_to(root).parts:
                continue
            if _is_ignored(rel, ignore):
                continue
            found.setdefault(rel, candidate)

    return [found[rel] for rel in sorted(found)]


def discover_packages(
    root: Path, patterns: list[str], ignore: list[str] | None = None
) -> list[Package]:
    """Load every package under ``root`` matching ``patterns``."""
    return [Package.load(path) for path in find_package_dirs(root, patterns, ignore)]
