"""Project-level validation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tandem.diagnostics import Diagnostic, DiagnosticKind, DiagnosticSink, first_sink
from tandem.versioning.ranges import admits

if TYPE_CHECKING:
    from tandem.workspace.workspace import Workspace


def validate_project(workspace: Workspace, on_diagnostic: DiagnosticSink | None = None) -> bool:
    """Validate the workspace as a whole.

    Checks, each reporting through ``on_diagnostic``:

    - every internal dependency range admits the target's current version;
    - the running tandem satisfies ``tandem_version`` from tandem.yaml;
    - the root package.json does not depend on a workspace package.

    Returns:
        True when no check failed.
    """
    from tandem import __version__

    emit = first_sink(on_diagnostic, workspace.on_diagnostic)
    valid = True

    required = workspace.config.tandem_version
    if required and not admits(__version__, required):
        valid = False
        emit(
            Diagnostic(
                kind=DiagnosticKind.PROJECT_VALIDITY,
                message=(
                    f"tandem.yaml requires tandem {required}, "
                    f"but version {__version__} is running"
                ),
            )
        )

    if workspace.root_manifest is not None:
        root_deps = workspace.root_manifest.get_all_dependencies()
        for name in workspace.packages:
            if name in root_deps:
                valid = False
                emit(
                    Diagnostic(
                        kind=DiagnosticKind.PROJECT_VALIDITY,
                        message=(
                            f"The root package.json depends on workspace package '{name}'; "
                            "workspaces must not be root dependencies"
                        ),
                        packages=(name,),
                    )
                )

    if not workspace.graph.is_valid(on_diagnostic=emit):
        valid = False

    return valid
