"""tandem commands."""

from tandem.commands.base import Command, CommandContext, SyncCommand
from tandem.commands.check import CheckCommand, CheckResult, check_project
from tandem.commands.exec import ExecCommand, ExecOptions, exec_command, execute_in_packages
from tandem.commands.list import (
    ListCommand,
    ListFormat,
    ListOptions,
    ListResult,
    PackageInfo,
    list_packages,
)
from tandem.commands.run import RunCommand, RunOptions, run_script
from tandem.commands.update_versions import (
    UpdateVersionsCommand,
    UpdateVersionsOptions,
    UpdateVersionsResult,
    load_version_file,
    parse_version_specs,
    update_versions,
)

__all__ = [
    # Base
    "Command",
    "SyncCommand",
    "CommandContext",
    # Run
    "RunCommand",
    "RunOptions",
    "run_script",
    # Exec
    "ExecCommand",
    "ExecOptions",
    "exec_command",
    "execute_in_packages",
    # List
    "ListCommand",
    "ListOptions",
    "ListResult",
    "ListFormat",
    "PackageInfo",
    "list_packages",
    # Check
    "CheckCommand",
    "CheckResult",
    "check_project",
    # Update versions
    "UpdateVersionsCommand",
    "UpdateVersionsOptions",
    "UpdateVersionsResult",
    "update_versions",
    "parse_version_specs",
    "load_version_file",
]
