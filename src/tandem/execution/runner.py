"""Shell command execution inside a package directory."""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

from tandem.execution.results import ExecutionResult

if TYPE_CHECKING:
    from tandem.workspace.package import Package

LineCallback = Callable[[str], None]


class CommandOutput(NamedTuple):
    """Captured outcome of one shell command."""

    exit_code: int
    stdout: str
    stderr: str
    duration_ms: int


async def _pump(
    stream: asyncio.StreamReader, sink: list[str], on_line: LineCallback | None
) -> None:
    while line := await stream.readline():
        text = line.decode("utf-8", errors="replace")
        sink.append(text)
        if on_line:
            on_line(text.rstrip("\r\n"))


async def run_command(
    command: str,
    cwd: Path,
    *,
    env: dict[str, str] | None = None,
    timeout: float | None = None,
    on_stdout: LineCallback | None = None,
    on_stderr: LineCallback | None = None,
) -> CommandOutput:
    """Run ``command`` through the shell and capture its output.

    Output is streamed line by line to the callbacks while it is captured.
    A command that cannot be spawned, or runs past ``timeout`` seconds (it is
    then killed), reports exit code -1 with the reason on stderr.

    Args:
        command: Shell command line.
        cwd: Working directory.
        env: Variables layered over the current environment.
        timeout: Seconds before the process is killed, None to wait forever.
        on_stdout: Called with each stdout line, newline stripped.
        on_stderr: Called with each stderr line, newline stripped.
    """
    started = time.monotonic()

    def elapsed() -> int:
        return int((time.monotonic() - started) * 1000)

    try:
        process = await asyncio.create_subprocess_shell(
            command,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env={**os.environ, **(env or {})},
        )
    except OSError as e:
        return CommandOutput(-1, "", str(e), elapsed())

    if process.stdout is None or process.stderr is None:
        raise RuntimeError("Process stdout/stderr is None")

    out: list[str] = []
    err: list[str] = []
    try:
        await asyncio.wait_for(
            asyncio.gather(
                _pump(process.stdout, out, on_stdout),
                _pump(process.stderr, err, on_stderr),
                process.wait(),
            ),
            timeout=timeout,
        )
    except (asyncio.TimeoutError, TimeoutError):
        process.kill()
        await process.wait()
        return CommandOutput(-1, "".join(out), f"Command timed out after {timeout}s", elapsed())

    return CommandOutput(process.returncode or 0, "".join(out), "".join(err), elapsed())


def package_env(package: Package, env: dict[str, str] | None = None) -> dict[str, str]:
    """Environment for commands run in ``package``."""
    return {
        **(env or {}),
        "TANDEM_PACKAGE_NAME": package.name,
        "TANDEM_PACKAGE_PATH": str(package.path),
        "TANDEM_PACKAGE_VERSION": package.version,
    }


async def run_in_package(
    package: Package,
    command: str,
    *,
    env: dict[str, str] | None = None,
    timeout: float | None = None,
    on_stdout: LineCallback | None = None,
    on_stderr: LineCallback | None = None,
) -> ExecutionResult:
    """Run ``command`` in the package directory.

    A non-zero exit code becomes a failure result rather than an exception,
    so the scheduler can skip the package's dependents.
    """
    output = await run_command(
        command,
        cwd=package.path,
        env=package_env(package, env),
        timeout=timeout,
        on_stdout=on_stdout,
        on_stderr=on_stderr,
    )

    if output.exit_code == 0:
        return ExecutionResult.success_result(
            package.name,
            stdout=output.stdout,
            stderr=output.stderr,
            duration_ms=output.duration_ms,
            command=command,
        )
    return ExecutionResult.failure_result(
        package.name,
        exit_code=output.exit_code,
        stdout=output.stdout,
        stderr=output.stderr,
        duration_ms=output.duration_ms,
        command=command,
    )
