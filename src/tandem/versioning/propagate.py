"""Propagate externally decided version bumps to internal dependency ranges."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from tandem.diagnostics import Diagnostic, DiagnosticKind, DiagnosticSink, first_sink
from tandem.errors import ReleasePlanInconsistentError
from tandem.versioning.ranges import admits, range_type

if TYPE_CHECKING:
    from tandem.workspace.graph import DependencyGraph
    from tandem.workspace.package import Package
    from tandem.workspace.workspace import Workspace

logger = logging.getLogger(__name__)

VersionMap = Mapping[str, str]


def update_package_versions(
    updated: VersionMap,
    workspace: Workspace | None = None,
    *,
    graph: DependencyGraph | None = None,
    packages: list[Package] | None = None,
    on_diagnostic: DiagnosticSink | None = None,
) -> set[Path]:
    """Rewrite internal dependency ranges for a set of new versions.

    Each rewritten range keeps its operator: a caret range stays a caret
    range, a tilde range stays tilde, anything else becomes the bare new
    version. A dependency declared in several groups gets one new range in
    all of them, built from the operator of the first group that lists it
    (dependencies, then dev, peer and optional). Only packages that are
    themselves part of ``updated`` are rewritten. Names in ``updated`` that
    are not workspace packages are reported once and otherwise ignored.

    Nothing is written to disk; persist the manifests of the returned paths.
    A failure midway leaves earlier rewrites of this call in place.

    Args:
        updated: Package name to new version.
        workspace: Workspace to update. Alternatively pass ``graph`` and
            ``packages`` directly.
        graph: Dependency graph (defaults to ``workspace.graph``).
        packages: Packages to visit (defaults to all graph packages).
        on_diagnostic: Diagnostics sink.

    Returns:
        Manifest paths whose content changed.

    Raises:
        ReleasePlanInconsistentError: A package outside ``updated`` would be
            left with a range that excludes a dependency's new version.
    """
    if graph is None:
        if workspace is None:
            raise TypeError("update_package_versions() needs a workspace or a graph")
        graph = workspace.graph
    if packages is None:
        packages = graph.packages
    emit = first_sink(on_diagnostic, workspace.on_diagnostic if workspace else None)

    internal = [name for name in updated if graph.get_by_name(name) is not None]
    external = [name for name in updated if graph.get_by_name(name) is None]
    if external:
        emit(
            Diagnostic(
                kind=DiagnosticKind.EXTERNAL_DEPENDENCY_IGNORED,
                message=(
                    "Ignoring packages that are not part of the workspace: "
                    + ", ".join(external)
                ),
                packages=tuple(external),
            )
        )

    released = set(internal)
    edited: set[Path] = set()

    for pkg in packages:
        manifest = pkg.manifest
        for dep_name in internal:
            dep_types = manifest.get_dependency_types(dep_name)
            if not dep_types:
                continue

            current_range = manifest.get_dependency_range(dep_name)
            assert current_range is not None
            new_version = updated[dep_name]

            if pkg.name not in released:
                if not admits(new_version, current_range):
                    raise ReleasePlanInconsistentError(
                        pkg.name, dep_name, current_range, new_version
                    )
                continue

            new_range = range_type(current_range) + new_version
            changed = False
            for dep_type in dep_types:
                changed |= manifest.set_dependency_range(dep_name, dep_type, new_range)
            if changed:
                logger.debug("%s: %s %s -> %s", pkg.name, dep_name, current_range, new_range)
                edited.add(manifest.path)

    return edited
