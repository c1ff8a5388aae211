"""Run command implementation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tandem.commands.base import Command, CommandContext
from tandem.commands.exec import OutputHandler, execute_in_packages
from tandem.errors import ScriptNotFoundError
from tandem.execution import BatchResult

if TYPE_CHECKING:
    from tandem.workspace import Package
    from tandem.workspace.workspace import Workspace


@dataclass
class RunOptions:
    """Options for run command.

    Unset values fall back to the script, then to ``command_defaults``.
    """

    script_name: str
    scope: str | None = None
    ignore: list[str] | None = None
    only_fs: str | None = None
    ignore_fs: str | None = None
    concurrency: int | None = None
    fail_fast: bool | None = None
    topological: bool | None = None
    include_dependents: bool = False


class RunCommand(Command[BatchResult]):
    """Run a defined script across packages.

    Scripts are defined in tandem.yaml and run in dependency order unless
    the script or the caller turns that off.
    """

    def __init__(
        self,
        context: CommandContext,
        options: RunOptions,
        output_handler: OutputHandler | None = None,
    ) -> None:
        super().__init__(context)
        self.options = options
        self.output_handler = output_handler

    def validate(self) -> list[str]:
        """Validate the command."""
        errors = super().validate()

        script = self.workspace.config.get_script(self.options.script_name)
        if not script:
            errors.append(
                f"Script '{self.options.script_name}' not found. "
                f"Available: {', '.join(self.workspace.config.script_names)}"
            )

        return errors

    def get_packages(self) -> list[Package]:
        """Get packages to run script in."""
        from tandem.filters import apply_filters

        script = self.workspace.config.get_script(self.options.script_name)
        scope = self.options.scope
        if not scope and script and script.scope:
            scope = script.scope

        return apply_filters(
            list(self.workspace.packages.values()),
            self.workspace,
            scope=scope,
            ignore=self.options.ignore,
            only_fs=self.options.only_fs,
            ignore_fs=self.options.ignore_fs,
            include_dependents=self.options.include_dependents,
        )

    async def execute(self) -> BatchResult:
        """Execute the script."""
        if self.validate():
            raise ScriptNotFoundError(
                self.options.script_name,
                self.workspace.config.script_names,
            )

        script = self.workspace.config.get_script(self.options.script_name)
        assert script is not None  # validate() already checked

        packages = self.get_packages()
        if not packages:
            return BatchResult(results=[])

        env = dict(self.context.env)
        env.update(self.workspace.config.env)
        env.update(script.env)

        defaults = self.workspace.config.command_defaults
        concurrency = self.options.concurrency or defaults.concurrency
        fail_fast = self.options.fail_fast
        if fail_fast is None:
            fail_fast = script.fail_fast or defaults.fail_fast
        topological = self.options.topological
        if topological is None:
            topological = script.topological and defaults.topological

        return await execute_in_packages(
            self.workspace,
            packages,
            script.run,
            env=env,
            concurrency=concurrency,
            fail_fast=fail_fast,
            topological=topological,
            output_handler=self.output_handler,
            on_diagnostic=self.on_diagnostic,
        )


async def run_script(
    workspace: Workspace,
    script_name: str,
    *,
    scope: str | None = None,
    ignore: list[str] | None = None,
    only_fs: str | None = None,
    ignore_fs: str | None = None,
    concurrency: int | None = None,
    fail_fast: bool | None = None,
    topological: bool | None = None,
    output_handler: OutputHandler | None = None,
) -> BatchResult:
    """Convenience function to run a script.

    Args:
        workspace: Workspace to run in.
        script_name: Name of script to run.
        scope: Package scope filter.
        ignore: Patterns to exclude.
        only_fs: Path glob to keep.
        ignore_fs: Path glob to drop.
        concurrency: Parallel jobs.
        fail_fast: Stop on first failure.
        topological: Respect dependency order.
        output_handler: Callback for output streaming.

    Returns:
        Batch result with all execution results.
    """
    context = CommandContext(workspace=workspace)
    options = RunOptions(
        script_name=script_name,
        scope=scope,
        ignore=ignore,
        only_fs=only_fs,
        ignore_fs=ignore_fs,
        concurrency=concurrency,
        fail_fast=fail_fast,
        topological=topological,
    )
    cmd = RunCommand(context, options, output_handler=output_handler)
    return await cmd.execute()
