"""Ignore-based package filtering."""

from __future__ import annotations

from tandem.filters.scope import match_scope
from tandem.workspace.package import Package


def should_ignore(package: Package, patterns: list[str]) -> bool:
    """Check if a package name matches any ignore pattern."""
    if not patterns:
        return False
    return match_scope(package, patterns)


def filter_by_ignore(packages: list[Package], ignore: list[str] | None) -> list[Package]:
    """Filter out packages whose name matches an ignore pattern."""
    if not ignore:
        return packages

    return [p for p in packages if not should_ignore(p, ignore)]
