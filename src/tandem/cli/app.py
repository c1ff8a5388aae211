"""tandem CLI application."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tandem.diagnostics import Diagnostic
from tandem.errors import TandemError
from tandem.execution import BatchResult, ExecutionStatus
from tandem.workspace import Workspace


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from tandem import __version__

        print(f"tandem {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="tandem",
    help="Dependency-aware task runner for package.json monorepos",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()
error_console = Console(stderr=True)


@app.callback()
def _app_callback(
    version: Annotated[  # noqa: ARG001
        bool,
        typer.Option("--version", "-V", help="Show version and exit", callback=version_callback),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """Dependency-aware task runner for package.json monorepos."""
    from tandem.log import setup_logging

    setup_logging("DEBUG" if verbose else "WARNING", console=error_console)


def print_diagnostic(diagnostic: Diagnostic) -> None:
    """Show a diagnostic as soon as it is emitted."""
    error_console.print(f"[yellow]Warning:[/yellow] {escape(diagnostic.message)}")


def parse_comma_list(value: str | None) -> list[str] | None:
    """Parse comma-separated string into list."""
    return value.split(",") if value else None


def get_workspace(path: Path | None = None) -> Workspace:
    """Load workspace from current directory or specified path."""
    try:
        return Workspace.discover(path, on_diagnostic=print_diagnostic)
    except TandemError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e


def print_batch(result: BatchResult, *, show_output: bool = True) -> None:
    """Print per-package outcome and a summary; exit 1 on failure."""
    for r in result:
        package_name = escape(f"[{r.package_name}]")
        if r.success:
            console.print(f"[green]✓[/green] {package_name} ({r.duration_ms}ms)")
            if show_output and r.stdout:
                console.print(r.stdout.rstrip())
        elif r.status == ExecutionStatus.FAILURE:
            console.print(f"[red]✗[/red] {package_name} (exit {r.exit_code})")
            if r.stderr:
                error_console.print(escape(r.stderr.rstrip()))
        elif r.status == ExecutionStatus.SKIPPED:
            console.print(f"[yellow]-[/yellow] {package_name} skipped")
        else:
            console.print(f"[dim]-[/dim] {package_name} cancelled")

    if result.all_success:
        console.print(f"\n[green]All {len(result)} packages passed[/green]")
        return

    console.print(
        f"\n[red]{result.failure_count} failed, {result.success_count} passed"
        f", {result.skipped_count} skipped, {result.cancelled_count} cancelled[/red]"
    )
    raise typer.Exit(1)


ScopeOption = Annotated[
    str | None,
    typer.Option("--scope", "-s", help="Package names or globs (comma-separated)"),
]
IgnoreOption = Annotated[
    str | None,
    typer.Option("--ignore", "-i", help="Package names or globs to skip (comma-separated)"),
]
OnlyFsOption = Annotated[
    str | None,
    typer.Option("--only-fs", help="Only packages whose path matches this glob"),
]
IgnoreFsOption = Annotated[
    str | None,
    typer.Option("--ignore-fs", help="Skip packages whose path matches this glob"),
]
ConcurrencyOption = Annotated[
    int | None,
    typer.Option("--concurrency", "-c", min=1, help="Parallel jobs (default: unlimited)"),
]
FailFastOption = Annotated[
    bool,
    typer.Option("--fail-fast", help="Stop starting packages after the first failure"),
]
IncludeDependentsOption = Annotated[
    bool,
    typer.Option("--include-dependents", help="Also select packages depending on the selection"),
]


@app.command("run")
def run_cmd(
    script: Annotated[str, typer.Argument(help="Script name to run")],
    scope: ScopeOption = None,
    ignore: IgnoreOption = None,
    only_fs: OnlyFsOption = None,
    ignore_fs: IgnoreFsOption = None,
    concurrency: ConcurrencyOption = None,
    fail_fast: FailFastOption = False,
    no_topological: Annotated[
        bool,
        typer.Option("--no-topological", help="Ignore dependency order"),
    ] = False,
    include_dependents: IncludeDependentsOption = False,
) -> None:
    """Run a script from tandem.yaml across packages."""
    from tandem.commands import CommandContext, RunCommand, RunOptions

    workspace = get_workspace()
    options = RunOptions(
        script_name=script,
        scope=scope,
        ignore=parse_comma_list(ignore),
        only_fs=only_fs,
        ignore_fs=ignore_fs,
        concurrency=concurrency,
        fail_fast=fail_fast or None,
        topological=False if no_topological else None,
        include_dependents=include_dependents,
    )
    command = RunCommand(CommandContext(workspace=workspace), options)

    try:
        result = asyncio.run(command.execute())
    except TandemError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e

    print_batch(result)


@app.command("exec")
def exec_cmd(
    command: Annotated[str, typer.Argument(help="Command to execute")],
    scope: ScopeOption = None,
    ignore: IgnoreOption = None,
    only_fs: OnlyFsOption = None,
    ignore_fs: IgnoreFsOption = None,
    concurrency: ConcurrencyOption = None,
    fail_fast: FailFastOption = False,
    topological: Annotated[
        bool,
        typer.Option("--topological", "-t", help="Respect dependency order"),
    ] = False,
    include_dependents: IncludeDependentsOption = False,
) -> None:
    """Execute an arbitrary shell command across packages."""
    from tandem.commands import CommandContext, ExecCommand, ExecOptions

    workspace = get_workspace()
    options = ExecOptions(
        command=command,
        scope=scope,
        ignore=parse_comma_list(ignore),
        only_fs=only_fs,
        ignore_fs=ignore_fs,
        concurrency=concurrency,
        fail_fast=fail_fast,
        topological=topological,
        include_dependents=include_dependents,
    )
    cmd = ExecCommand(CommandContext(workspace=workspace), options)

    try:
        result = asyncio.run(cmd.execute())
    except TandemError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e

    print_batch(result)


@app.command("list")
def list_cmd(
    scope: ScopeOption = None,
    ignore: IgnoreOption = None,
    only_fs: OnlyFsOption = None,
    ignore_fs: IgnoreFsOption = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
    graph: Annotated[
        bool,
        typer.Option("--graph", help="Show dependency graph"),
    ] = False,
) -> None:
    """List workspace packages."""
    from tandem.commands import ListFormat, list_packages

    workspace = get_workspace()

    fmt = ListFormat.TABLE
    if json_output:
        fmt = ListFormat.JSON
    elif graph:
        fmt = ListFormat.GRAPH

    result = list_packages(
        workspace,
        scope=scope,
        ignore=parse_comma_list(ignore),
        only_fs=only_fs,
        ignore_fs=ignore_fs,
        format=fmt,
    )

    if fmt == ListFormat.JSON:
        data = [
            {
                "name": p.name,
                "version": p.version,
                "path": p.path,
                "description": p.description,
                "dependencies": p.dependencies,
                "dependents": p.dependents,
            }
            for p in result.packages
        ]
        console.print_json(json.dumps(data))
    elif fmt == ListFormat.GRAPH:
        for pkg in result.packages:
            if not pkg.dependencies:
                console.print(f"[bold]{escape(pkg.name)}[/bold] v{pkg.version}")
            else:
                deps_str = escape(", ".join(pkg.dependencies))
                console.print(f"[bold]{escape(pkg.name)}[/bold] v{pkg.version} -> {deps_str}")
    else:
        table = Table(title="Packages")
        table.add_column("Name", style="bold")
        table.add_column("Version")
        table.add_column("Path")
        table.add_column("Dependencies")

        for pkg in result.packages:
            deps = ", ".join(pkg.dependencies) if pkg.dependencies else "-"
            table.add_row(escape(pkg.name), pkg.version, pkg.path, escape(deps))

        console.print(table)


@app.command()
def check() -> None:
    """Validate dependency ranges and project settings."""
    from tandem.commands import check_project

    workspace = get_workspace()
    # diagnostics are printed by the workspace sink as they are found
    result = check_project(workspace)

    if result.valid:
        console.print(f"[green]{workspace.name}: {len(workspace.packages)} packages OK[/green]")
        return

    error_console.print(f"[red]{len(result.diagnostics)} problem(s) found[/red]")
    raise typer.Exit(1)


@app.command("update-versions")
def update_versions_cmd(
    versions: Annotated[
        list[str] | None,
        typer.Argument(help="New versions as NAME@VERSION"),
    ] = None,
    from_json: Annotated[
        Path | None,
        typer.Option("--from-json", help="JSON file mapping package name to version"),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show edited manifests without writing them"),
    ] = False,
) -> None:
    """Rewrite internal dependency ranges for newly released versions."""
    from tandem.commands import load_version_file, parse_version_specs, update_versions

    workspace = get_workspace()

    try:
        version_map = load_version_file(from_json) if from_json else {}
        version_map.update(parse_version_specs(versions or []))
        if not version_map:
            error_console.print("[red]Error:[/red] no versions given")
            raise typer.Exit(1)
        result = update_versions(workspace, version_map, dry_run=dry_run)
    except TandemError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e

    if not result.edited:
        console.print("[yellow]No manifests needed changes[/yellow]")
        return

    verb = "Would update" if dry_run else "Updated"
    for path in result.edited:
        console.print(f"{verb} {path}/package.json")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
