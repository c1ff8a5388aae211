"""Execution result types."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum


class ExecutionStatus(Enum):
    """Lifecycle state of one package within a scheduled run.

    ``SUCCESS``, ``FAILURE``, ``SKIPPED`` and ``CANCELLED`` are terminal.
    """

    PENDING = "pending"
    WAITING = "waiting"
    READY = "ready"
    RUNNING = "running"
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {
        ExecutionStatus.SUCCESS,
        ExecutionStatus.FAILURE,
        ExecutionStatus.SKIPPED,
        ExecutionStatus.CANCELLED,
    }
)


@dataclass
class ExecutionResult:
    """Outcome of a task for a single package.

    Attributes:
        package_name: Package the task ran for.
        status: Terminal status.
        exit_code: Process exit code, or 0/1 for in-process tasks.
        stdout: Captured standard output.
        stderr: Captured standard error.
        duration_ms: Wall time in milliseconds.
        command: Shell command, when the task ran one.
        error: Exception raised by the task, if any.
        value: Return value of an in-process task.
    """

    package_name: str
    status: ExecutionStatus
    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0
    command: str | None = None
    error: BaseException | None = field(default=None, repr=False)
    value: object = field(default=None, repr=False)

    @property
    def success(self) -> bool:
        return self.status == ExecutionStatus.SUCCESS

    @property
    def failed(self) -> bool:
        return self.status == ExecutionStatus.FAILURE

    @classmethod
    def success_result(
        cls,
        package_name: str,
        *,
        stdout: str = "",
        stderr: str = "",
        duration_ms: int = 0,
        command: str | None = None,
        value: object = None,
    ) -> ExecutionResult:
        return cls(
            package_name=package_name,
            status=ExecutionStatus.SUCCESS,
            exit_code=0,
            stdout=stdout,
            stderr=stderr,
            duration_ms=duration_ms,
            command=command,
            value=value,
        )

    @classmethod
    def failure_result(
        cls,
        package_name: str,
        *,
        exit_code: int = 1,
        stdout: str = "",
        stderr: str = "",
        duration_ms: int = 0,
        command: str | None = None,
        error: BaseException | None = None,
    ) -> ExecutionResult:
        return cls(
            package_name=package_name,
            status=ExecutionStatus.FAILURE,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr if stderr or error is None else str(error),
            duration_ms=duration_ms,
            command=command,
            error=error,
        )

    @classmethod
    def skipped_result(cls, package_name: str, reason: str) -> ExecutionResult:
        return cls(
            package_name=package_name,
            status=ExecutionStatus.SKIPPED,
            exit_code=-1,
            stderr=reason,
        )

    @classmethod
    def cancelled_result(cls, package_name: str) -> ExecutionResult:
        return cls(package_name=package_name, status=ExecutionStatus.CANCELLED, exit_code=-1)


@dataclass
class BatchResult:
    """Results of a run over several packages, in input order."""

    results: list[ExecutionResult] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[ExecutionResult]:
        return iter(self.results)

    def get(self, package_name: str) -> ExecutionResult | None:
        return next((r for r in self.results if r.package_name == package_name), None)

    @property
    def all_success(self) -> bool:
        return all(r.success for r in self.results)

    @property
    def any_failure(self) -> bool:
        return any(r.failed for r in self.results)

    @property
    def failures(self) -> list[ExecutionResult]:
        return [r for r in self.results if r.failed]

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def skipped_count(self) -> int:
        return sum(1 for r in self.results if r.status == ExecutionStatus.SKIPPED)

    @property
    def cancelled_count(self) -> int:
        return sum(1 for r in self.results if r.status == ExecutionStatus.CANCELLED)
