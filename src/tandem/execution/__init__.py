"""Task scheduling and command execution."""

from tandem.execution.results import BatchResult, ExecutionResult, ExecutionStatus
from tandem.execution.runner import CommandOutput, run_command, run_in_package
from tandem.execution.scheduler import Task, TaskScheduler, run_workspace_tasks

__all__ = [
    "BatchResult",
    "CommandOutput",
    "ExecutionResult",
    "ExecutionStatus",
    "Task",
    "TaskScheduler",
    "run_command",
    "run_in_package",
    "run_workspace_tasks",
]
