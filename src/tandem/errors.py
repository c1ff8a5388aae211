"""tandem exception hierarchy."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tandem.execution.results import BatchResult, ExecutionResult


class TandemError(Exception):
    """Base exception for all tandem errors.

    Attributes:
        message: Human readable description.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(TandemError):
    """Invalid or unreadable tandem.yaml."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


class WorkspaceNotFoundError(TandemError):
    """No tandem.yaml found in the directory or any parent."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"No tandem.yaml found in {path} or any parent directory")


class ManifestError(TandemError):
    """A package.json could not be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid manifest {path}: {reason}")


class PackageNotFoundError(TandemError):
    """Requested package is not part of the workspace."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.name = name
        self.available = available or []
        message = f"Package '{name}' not found"
        if self.available:
            message += f". Available: {', '.join(self.available)}"
        super().__init__(message)


class ScriptNotFoundError(TandemError):
    """Script is not defined in tandem.yaml."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = available
        message = f"Script '{name}' not found"
        if available:
            message += f". Available: {', '.join(available)}"
        super().__init__(message)


class TaskExecutionError(TandemError):
    """At least one package task failed during a scheduled run.

    Attributes:
        package_name: First package whose task failed.
        result: Result of that package.
        batch: Results of the whole run.
    """

    def __init__(self, result: ExecutionResult, batch: BatchResult) -> None:
        self.package_name = result.package_name
        self.result = result
        self.batch = batch
        reason = str(result.error) if result.error else f"exit code {result.exit_code}"
        failures = batch.failure_count
        message = f"Task failed for '{result.package_name}': {reason}"
        if failures > 1:
            message += f" (and {failures - 1} more)"
        super().__init__(message)


class ReleasePlanInconsistentError(TandemError):
    """A version bump would leave an unreleased package outside its declared range.

    Raised by the version propagator when ``package`` is not itself part of
    the update set but its range for ``dependency`` does not admit the new
    version.
    """

    def __init__(self, package: str, dependency: str, range_: str, version: str) -> None:
        self.package = package
        self.dependency = dependency
        self.range = range_
        self.version = version
        super().__init__(
            f"'{package}' depends on '{dependency}@{range_}', which does not allow "
            f"the new version {version}, and '{package}' is not being released. "
            f"Add '{package}' to the release or widen its range."
        )
