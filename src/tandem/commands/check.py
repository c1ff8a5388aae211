"""Check command: validate the project."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tandem.commands.base import CommandContext, SyncCommand
from tandem.diagnostics import Diagnostic, DiagnosticCollector
from tandem.validation import validate_project

if TYPE_CHECKING:
    from tandem.workspace.workspace import Workspace


@dataclass
class CheckResult:
    """Result of check command."""

    valid: bool
    diagnostics: list[Diagnostic] = field(default_factory=list)


class CheckCommand(SyncCommand[CheckResult]):
    """Run project validation, collecting every diagnostic."""

    def execute(self) -> CheckResult:
        collector = DiagnosticCollector()
        valid = validate_project(self.workspace, on_diagnostic=collector)
        sink = self.on_diagnostic
        if sink is not None:
            for diagnostic in collector:
                sink(diagnostic)
        return CheckResult(valid=valid, diagnostics=list(collector))


def check_project(workspace: Workspace) -> CheckResult:
    """Convenience function to validate a workspace."""
    return CheckCommand(CommandContext(workspace=workspace)).execute()
