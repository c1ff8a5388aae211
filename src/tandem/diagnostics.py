"""Diagnostics emitted while building, validating and scheduling.

Graph, scheduler and propagator take an ``on_diagnostic`` callback so a
caller (or a test) decides where warnings go. Without one, diagnostics are
logged as warnings on the ``tandem`` logger.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger("tandem")


class DiagnosticKind(Enum):
    """Category of a diagnostic."""

    GRAPH_VALIDITY = "graph-validity"
    SCHEDULING_CYCLE = "scheduling-cycle"
    EXTERNAL_DEPENDENCY_IGNORED = "external-dependency-ignored"
    PROJECT_VALIDITY = "project-validity"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single non-fatal finding.

    Attributes:
        kind: Diagnostic category.
        message: Human readable text.
        packages: Package names involved, most relevant first.
    """

    kind: DiagnosticKind
    message: str
    packages: tuple[str, ...] = ()

    def __str__(self) -> str:
        return self.message


DiagnosticSink = Callable[[Diagnostic], None]


def log_diagnostic(diagnostic: Diagnostic) -> None:
    """Default sink: log as a warning."""
    logger.warning("[%s] %s", diagnostic.kind.value, diagnostic.message)


def first_sink(*sinks: DiagnosticSink | None) -> DiagnosticSink:
    """The first sink that is set, falling back to :func:`log_diagnostic`."""
    for sink in sinks:
        if sink is not None:
            return sink
    return log_diagnostic


@dataclass
class DiagnosticCollector:
    """Sink that keeps every diagnostic it receives."""

    diagnostics: list[Diagnostic] = field(default_factory=list)

    def __call__(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __bool__(self) -> bool:
        # a sink is truthy even before it has received anything
        return True

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        """Diagnostics of one kind, in emission order."""
        return [d for d in self.diagnostics if d.kind == kind]
