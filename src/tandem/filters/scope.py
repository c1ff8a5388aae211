"""Scope-based package filtering."""

from __future__ import annotations

import fnmatch

from tandem.workspace.package import Package


def parse_scope(scope: str) -> list[str]:
    """Split a comma-separated scope into patterns.

    ``"core,@acme/*"`` -> ``["core", "@acme/*"]``
    """
    if not scope:
        return []
    return [p.strip() for p in scope.split(",") if p.strip()]


def match_scope(package: Package, patterns: list[str]) -> bool:
    """Check if a package name matches any scope pattern.

    A pattern matches the full name, or, for scoped names like
    ``@acme/foo``, the part after the scope.
    """
    if not patterns:
        return True

    name = package.name
    unscoped = name.split("/", 1)[1] if name.startswith("@") and "/" in name else name

    for pattern in patterns:
        if name == pattern or name.lower() == pattern.lower():
            return True
        if fnmatch.fnmatchcase(name, pattern) or fnmatch.fnmatchcase(unscoped, pattern):
            return True
        # "**/foo" matches any scope
        if pattern.startswith("**/") and fnmatch.fnmatchcase(unscoped, pattern[3:]):
            return True

    return False


def filter_by_scope(packages: list[Package], scope: str | None) -> list[Package]:
    """Keep packages matching ``scope``; everything when no scope is given."""
    if not scope:
        return packages

    patterns = parse_scope(scope)
    if not patterns:
        return packages

    return [p for p in packages if match_scope(p, patterns)]
