"""Exec command implementation."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tandem.commands.base import Command, CommandContext
from tandem.diagnostics import DiagnosticSink
from tandem.execution import BatchResult, ExecutionResult, TaskScheduler, run_in_package

if TYPE_CHECKING:
    from tandem.workspace import Package
    from tandem.workspace.workspace import Workspace

OutputHandler = Callable[[str, str, bool], None]


@dataclass
class ExecOptions:
    """Options for exec command."""

    command: str
    scope: str | None = None
    ignore: list[str] | None = None
    only_fs: str | None = None
    ignore_fs: str | None = None
    concurrency: int | None = None
    fail_fast: bool = False
    topological: bool = False  # exec doesn't default to topological
    include_dependents: bool = False
    timeout: float | None = None


async def execute_in_packages(
    workspace: Workspace,
    packages: list[Package],
    command: str,
    *,
    env: dict[str, str] | None = None,
    concurrency: int | None = None,
    fail_fast: bool = False,
    topological: bool = True,
    timeout: float | None = None,
    output_handler: OutputHandler | None = None,
    on_diagnostic: DiagnosticSink | None = None,
) -> BatchResult:
    """Run a shell command in each package through the scheduler.

    Args:
        workspace: Workspace the packages belong to.
        packages: Packages to run in.
        command: Shell command.
        env: Extra environment variables.
        concurrency: Optional cap on parallel commands.
        fail_fast: Stop starting packages after the first failure.
        topological: Wait for in-run dependencies before starting a package.
        timeout: Per-package timeout in seconds.
        output_handler: Callback (pkg_name, line, is_stderr) for streaming output.
        on_diagnostic: Diagnostics sink.

    Returns:
        Batch result; failures are reported in it, not raised.
    """

    async def task(pkg: Package) -> ExecutionResult:
        on_out = None
        on_err = None
        if output_handler:
            handler = output_handler

            def _on_out(line: str) -> None:
                handler(pkg.name, line, False)

            def _on_err(line: str) -> None:
                handler(pkg.name, line, True)

            on_out = _on_out
            on_err = _on_err

        return await run_in_package(
            pkg,
            command,
            env=env,
            timeout=timeout,
            on_stdout=on_out,
            on_stderr=on_err,
        )

    scheduler = TaskScheduler(
        workspace.graph if topological else None,
        concurrency=concurrency,
        fail_fast=fail_fast,
        on_diagnostic=on_diagnostic if on_diagnostic is not None else workspace.on_diagnostic,
    )
    return await scheduler.run(packages, task, raise_on_failure=False)


class ExecCommand(Command[BatchResult]):
    """Execute an arbitrary command across packages.

    Unlike 'run', exec takes a direct command string rather
    than a script name from configuration.
    """

    def __init__(
        self,
        context: CommandContext,
        options: ExecOptions,
        output_handler: OutputHandler | None = None,
    ) -> None:
        super().__init__(context)
        self.options = options
        self.output_handler = output_handler

    def get_packages(self) -> list[Package]:
        """Get packages to execute command in."""
        from tandem.filters import apply_filters

        return apply_filters(
            list(self.workspace.packages.values()),
            self.workspace,
            scope=self.options.scope,
            ignore=self.options.ignore,
            only_fs=self.options.only_fs,
            ignore_fs=self.options.ignore_fs,
            include_dependents=self.options.include_dependents,
        )

    async def execute(self) -> BatchResult:
        """Execute the command."""
        packages = self.get_packages()
        if not packages:
            return BatchResult(results=[])

        env = dict(self.context.env)
        env.update(self.workspace.config.env)

        return await execute_in_packages(
            self.workspace,
            packages,
            self.options.command,
            env=env,
            concurrency=self.options.concurrency,
            fail_fast=self.options.fail_fast,
            topological=self.options.topological,
            timeout=self.options.timeout,
            output_handler=self.output_handler,
            on_diagnostic=self.on_diagnostic,
        )


async def exec_command(
    workspace: Workspace,
    command: str,
    *,
    scope: str | None = None,
    ignore: list[str] | None = None,
    only_fs: str | None = None,
    ignore_fs: str | None = None,
    concurrency: int | None = None,
    fail_fast: bool = False,
    topological: bool = False,
    output_handler: OutputHandler | None = None,
) -> BatchResult:
    """Convenience function to execute a command.

    Args:
        workspace: Workspace to run in.
        command: Command to execute.
        scope: Package scope filter.
        ignore: Patterns to exclude.
        only_fs: Path glob to keep.
        ignore_fs: Path glob to drop.
        concurrency: Parallel jobs, None for no limit.
        fail_fast: Stop on first failure.
        topological: Respect dependency order.
        output_handler: Callback for output streaming.

    Returns:
        Batch result with all execution results.
    """
    context = CommandContext(workspace=workspace)
    options = ExecOptions(
        command=command,
        scope=scope,
        ignore=ignore,
        only_fs=only_fs,
        ignore_fs=ignore_fs,
        concurrency=concurrency,
        fail_fast=fail_fast,
        topological=topological,
    )
    cmd = ExecCommand(context, options, output_handler=output_handler)
    return await cmd.execute()
