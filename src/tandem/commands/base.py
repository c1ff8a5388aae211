"""Base command infrastructure."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from tandem.diagnostics import DiagnosticSink
from tandem.workspace import Workspace

TResult = TypeVar("TResult")


@dataclass
class CommandContext:
    """Everything a command needs besides its own options.

    Attributes:
        workspace: Loaded workspace.
        dry_run: Report changes without writing them.
        verbose: Show detailed output.
        env: Extra environment for spawned commands, below workspace env.
        on_diagnostic: Where warnings go; the workspace's sink when unset.
    """

    workspace: Workspace
    dry_run: bool = False
    verbose: bool = False
    env: dict[str, str] = field(default_factory=dict)
    on_diagnostic: DiagnosticSink | None = None


class _CommandBase:
    def __init__(self, context: CommandContext) -> None:
        self.context = context
        self.workspace = context.workspace

    @property
    def on_diagnostic(self) -> DiagnosticSink | None:
        if self.context.on_diagnostic is not None:
            return self.context.on_diagnostic
        return self.workspace.on_diagnostic

    def validate(self) -> list[str]:
        """Problems preventing execution, empty when the command can run."""
        return []


class Command(_CommandBase, ABC, Generic[TResult]):
    """A workspace operation that awaits package tasks."""

    @abstractmethod
    async def execute(self) -> TResult: ...


class SyncCommand(_CommandBase, ABC, Generic[TResult]):
    """A workspace operation that completes without awaiting."""

    @abstractmethod
    def execute(self) -> TResult: ...
