"""Dependency-ordered concurrent task scheduling."""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable, Iterable
from typing import TYPE_CHECKING, Any

from tandem.diagnostics import Diagnostic, DiagnosticKind, DiagnosticSink, log_diagnostic
from tandem.errors import TaskExecutionError
from tandem.execution.results import BatchResult, ExecutionResult, ExecutionStatus

if TYPE_CHECKING:
    from tandem.workspace.graph import DependencyGraph
    from tandem.workspace.package import Package
    from tandem.workspace.workspace import Workspace

logger = logging.getLogger(__name__)

Task = Callable[["Package"], "Awaitable[Any] | Any"]


class TaskScheduler:
    """Run a task once per package, dependencies first, everything else in parallel.

    A package starts as soon as every dependency that is also part of the
    run has finished. Dependencies outside the run are ignored. When the
    remaining packages wait on each other in a cycle, the first package of
    the cycle (in input order) stops waiting on its cyclic predecessor and a
    ``SCHEDULING_CYCLE`` diagnostic is emitted.

    A package whose dependency failed, was skipped or was cancelled is not
    run and ends ``SKIPPED``. Unrelated branches keep going.

    Attributes:
        graph: Graph the edges are read from. Without one every package is
            independent and only the concurrency bound applies.
        concurrency: Maximum tasks running at once, None for no limit.
        fail_fast: Stop starting new packages after the first failure.
    """

    def __init__(
        self,
        graph: DependencyGraph | None,
        *,
        concurrency: int | None = None,
        fail_fast: bool = False,
        on_diagnostic: DiagnosticSink | None = None,
    ) -> None:
        self.graph = graph
        self.concurrency = max(1, concurrency) if concurrency is not None else None
        self.fail_fast = fail_fast
        self._on_diagnostic = on_diagnostic if on_diagnostic is not None else log_diagnostic
        self._cancelled = False
        self.states: dict[str, ExecutionStatus] = {}

    def cancel(self) -> None:
        """Stop starting new packages. Running tasks are left to finish."""
        self._cancelled = True

    async def run(
        self,
        packages: Iterable[Package],
        task: Task,
        *,
        raise_on_failure: bool = True,
    ) -> BatchResult:
        """Run ``task`` for every package.

        Args:
            packages: Packages to run, usually pre-filtered.
            task: Called with each package; may be sync or async. Returning
                an ``ExecutionResult`` reports that status directly, raising
                marks the package failed. A task that cancels itself ends
                ``CANCELLED`` without stopping the rest of the run.
            raise_on_failure: Raise once everything settled if any task failed.

        Returns:
            One result per package, in input order.

        Raises:
            TaskExecutionError: A task failed and ``raise_on_failure`` is set.
        """
        self._cancelled = False
        order: dict[str, Package] = {}
        for pkg in packages:
            order.setdefault(pkg.name, pkg)
        index = {name: i for i, name in enumerate(order)}

        waiting_on: dict[str, set[str]] = {}
        dependents: dict[str, list[str]] = {name: [] for name in order}
        for name in order:
            entry = self.graph.get_by_name(name) if self.graph is not None else None
            deps = {d.name for d in entry.dependencies} if entry else set()
            # edges leaving the run and self-loops impose no wait
            waiting_on[name] = {d for d in deps if d in order and d != name}
        for name in order:
            for dep in sorted(waiting_on[name], key=index.__getitem__):
                dependents[dep].append(name)

        self.states = {name: ExecutionStatus.PENDING for name in order}
        blocked_by: dict[str, set[str]] = {name: set() for name in order}
        results: dict[str, ExecutionResult] = {}
        ready: deque[str] = deque()
        running: dict[asyncio.Task[ExecutionResult], str] = {}
        semaphore = asyncio.Semaphore(self.concurrency) if self.concurrency else None
        may_have_cycle = True

        for name in order:
            if waiting_on[name]:
                self.states[name] = ExecutionStatus.WAITING
            else:
                self.states[name] = ExecutionStatus.READY
                ready.append(name)

        def settle(name: str, result: ExecutionResult) -> None:
            pending = [(name, result)]
            while pending:
                current, outcome = pending.pop(0)
                results[current] = outcome
                self.states[current] = outcome.status
                if outcome.failed and self.fail_fast:
                    self._cancelled = True
                for dependent in dependents[current]:
                    if self.states[dependent] != ExecutionStatus.WAITING:
                        continue
                    waiting_on[dependent].discard(current)
                    if not outcome.success:
                        blocked_by[dependent].add(current)
                    if waiting_on[dependent]:
                        continue
                    skipped = release(dependent)
                    if skipped is not None:
                        pending.append((dependent, skipped))

        def release(name: str) -> ExecutionResult | None:
            if blocked_by[name]:
                failed = ", ".join(sorted(blocked_by[name], key=index.__getitem__))
                logger.debug("Skipping %s: dependency %s did not succeed", name, failed)
                return ExecutionResult.skipped_result(
                    name, f"Skipped: dependency {failed} did not succeed"
                )
            self.states[name] = ExecutionStatus.READY
            ready.append(name)
            return None

        try:
            while True:
                if self._cancelled:
                    for name in order:
                        if self.states[name] in (ExecutionStatus.WAITING, ExecutionStatus.READY):
                            results[name] = ExecutionResult.cancelled_result(name)
                            self.states[name] = ExecutionStatus.CANCELLED
                    ready.clear()

                while ready:
                    name = ready.popleft()
                    self.states[name] = ExecutionStatus.RUNNING
                    logger.debug("Starting %s", name)
                    running[asyncio.create_task(self._invoke(order[name], task, semaphore))] = name

                waiting = any(s == ExecutionStatus.WAITING for s in self.states.values())
                if may_have_cycle and waiting:
                    cycle = self._find_cycle(list(order), waiting_on)
                    if cycle is None:
                        # edges only ever disappear, so no cycle can form later
                        may_have_cycle = False
                    else:
                        self._break_cycle(cycle, waiting_on)
                        if not waiting_on[cycle[0]]:
                            skipped = release(cycle[0])
                            if skipped is not None:
                                settle(cycle[0], skipped)
                        continue

                if not running:
                    break

                done, _ = await asyncio.wait(running, return_when=asyncio.FIRST_COMPLETED)
                for finished in sorted(done, key=lambda t: index[running[t]]):
                    name = running.pop(finished)
                    if finished.cancelled():
                        result = ExecutionResult.cancelled_result(name)
                    else:
                        result = finished.result()
                    logger.debug("Finished %s: %s", name, result.status.value)
                    settle(name, result)
        except asyncio.CancelledError:
            for pending_task in running:
                pending_task.cancel()
            raise

        batch = BatchResult(results=[results[name] for name in order])
        if raise_on_failure and batch.any_failure:
            raise TaskExecutionError(batch.failures[0], batch)
        return batch

    async def _invoke(
        self,
        package: Package,
        task: Task,
        semaphore: asyncio.Semaphore | None,
    ) -> ExecutionResult:
        async with semaphore or contextlib.nullcontext():
            start = time.monotonic()
            try:
                value = task(package)
                if inspect.isawaitable(value):
                    value = await value
            except Exception as e:
                duration_ms = int((time.monotonic() - start) * 1000)
                logger.debug("Task for %s raised %r", package.name, e)
                return ExecutionResult.failure_result(
                    package.name, duration_ms=duration_ms, error=e
                )

            if isinstance(value, ExecutionResult):
                return value
            duration_ms = int((time.monotonic() - start) * 1000)
            return ExecutionResult.success_result(
                package.name, duration_ms=duration_ms, value=value
            )

    def _find_cycle(self, order: list[str], waiting_on: dict[str, set[str]]) -> list[str] | None:
        """First wait-cycle among waiting packages, as ``[a, b, ..., a]``.

        Start points and neighbours are visited in input order.
        """
        position = {name: i for i, name in enumerate(order)}

        def waiting_deps(name: str) -> list[str]:
            return sorted(
                (d for d in waiting_on[name] if self.states[d] == ExecutionStatus.WAITING),
                key=position.__getitem__,
            )

        for start in order:
            if self.states[start] != ExecutionStatus.WAITING:
                continue
            path = [start]
            visited = {start}
            stack = [iter(waiting_deps(start))]
            while stack:
                nxt = next(stack[-1], None)
                if nxt is None:
                    stack.pop()
                    path.pop()
                    continue
                if nxt == start:
                    return [*path, start]
                if nxt in visited:
                    continue
                visited.add(nxt)
                path.append(nxt)
                stack.append(iter(waiting_deps(nxt)))
        return None

    def _break_cycle(self, cycle: list[str], waiting_on: dict[str, set[str]]) -> None:
        first, predecessor = cycle[0], cycle[1]
        waiting_on[first].discard(predecessor)
        self._on_diagnostic(
            Diagnostic(
                kind=DiagnosticKind.SCHEDULING_CYCLE,
                message=(
                    f"Dependency cycle detected: {' -> '.join(cycle)}. "
                    f"Running {first} without waiting for {predecessor}."
                ),
                packages=tuple(cycle[:-1]),
            )
        )


async def run_workspace_tasks(
    workspace: Workspace,
    packages: Iterable[Package] | None,
    task: Task,
    *,
    concurrency: int | None = None,
    fail_fast: bool = False,
    raise_on_failure: bool = True,
    on_diagnostic: DiagnosticSink | None = None,
) -> BatchResult:
    """Run ``task`` over workspace packages in dependency order.

    Args:
        workspace: Workspace whose graph orders the run.
        packages: Subset to run; None for every package.
        task: Per-package task.
        concurrency: Optional cap on parallel tasks.
        fail_fast: Stop starting packages after the first failure.
        raise_on_failure: Raise ``TaskExecutionError`` when a task failed.
        on_diagnostic: Diagnostics sink, defaults to the workspace's.

    Returns:
        Batch result in input order.
    """
    scheduler = TaskScheduler(
        workspace.graph,
        concurrency=concurrency,
        fail_fast=fail_fast,
        on_diagnostic=on_diagnostic if on_diagnostic is not None else workspace.on_diagnostic,
    )
    if packages is None:
        packages = list(workspace.packages.values())
    return await scheduler.run(packages, task, raise_on_failure=raise_on_failure)
