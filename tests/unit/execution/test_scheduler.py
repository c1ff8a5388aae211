"""Tests for the dependency-ordered task scheduler."""

from __future__ import annotations

import asyncio

import pytest

from tandem.diagnostics import DiagnosticCollector, DiagnosticKind
from tandem.errors import TaskExecutionError
from tandem.execution.results import ExecutionResult, ExecutionStatus
from tandem.execution.scheduler import TaskScheduler
from tandem.workspace.graph import DependencyGraph
from tandem.workspace.package import Package


def recording_task(ops: list[str]):
    async def task(pkg: Package) -> None:
        ops.append(f"start:{pkg.name}")
        # yield to the event loop once
        await asyncio.sleep(0)
        ops.append(f"end:{pkg.name}")

    return task


def scheduler_for(
    packages: list[Package], diagnostics: DiagnosticCollector, **kwargs
) -> TaskScheduler:
    graph = DependencyGraph(packages, on_diagnostic=diagnostics)
    return TaskScheduler(graph, on_diagnostic=diagnostics, **kwargs)


class TestOrdering:
    """Dependency order and concurrency."""

    async def test_independent_packages_start_together(self, make_package, diagnostics) -> None:
        packages = [make_package("bar"), make_package("foo")]
        ops: list[str] = []

        await scheduler_for(packages, diagnostics).run(packages, recording_task(ops))

        assert ops == ["start:bar", "start:foo", "end:bar", "end:foo"]

    async def test_dependency_finishes_before_dependent_starts(
        self, make_package, diagnostics
    ) -> None:
        packages = [
            make_package("bar"),
            make_package("foo", dependencies={"bar": "^1.0.0"}),
        ]
        ops: list[str] = []

        await scheduler_for(packages, diagnostics).run(packages, recording_task(ops))

        assert ops == ["start:bar", "end:bar", "start:foo", "end:foo"]

    async def test_order_does_not_depend_on_input_order(self, make_package, diagnostics) -> None:
        packages = [
            make_package("foo", dependencies={"bar": "^1.0.0"}),
            make_package("bar"),
        ]
        ops: list[str] = []

        await scheduler_for(packages, diagnostics).run(packages, recording_task(ops))

        assert ops == ["start:bar", "end:bar", "start:foo", "end:foo"]

    async def test_every_dependency_type_orders(self, make_package, diagnostics) -> None:
        packages = [
            make_package("app", devDependencies={"lib": "*"}, peerDependencies={"core": "*"}),
            make_package("lib"),
            make_package("core"),
        ]
        ops: list[str] = []

        await scheduler_for(packages, diagnostics).run(packages, recording_task(ops))

        assert ops.index("start:app") > ops.index("end:lib")
        assert ops.index("start:app") > ops.index("end:core")

    async def test_diamond_runs_middle_layer_concurrently(self, make_package, diagnostics) -> None:
        packages = [
            make_package("base"),
            make_package("left", dependencies={"base": "*"}),
            make_package("right", dependencies={"base": "*"}),
            make_package("top", dependencies={"left": "*", "right": "*"}),
        ]
        ops: list[str] = []

        await scheduler_for(packages, diagnostics).run(packages, recording_task(ops))

        assert ops == [
            "start:base",
            "end:base",
            "start:left",
            "start:right",
            "end:left",
            "end:right",
            "start:top",
            "end:top",
        ]

    async def test_dependent_starts_without_waiting_for_unrelated_work(
        self, make_package, diagnostics
    ) -> None:
        release_slow = asyncio.Event()
        ops: list[str] = []

        async def task(pkg: Package) -> None:
            ops.append(f"start:{pkg.name}")
            if pkg.name == "slow":
                await release_slow.wait()
            else:
                await asyncio.sleep(0)
            ops.append(f"end:{pkg.name}")
            if pkg.name == "child":
                release_slow.set()

        packages = [
            make_package("slow"),
            make_package("fast"),
            make_package("child", dependencies={"fast": "*"}),
        ]

        await scheduler_for(packages, diagnostics).run(packages, task)

        assert ops.index("end:child") < ops.index("end:slow")

    async def test_dependencies_outside_the_run_are_ignored(
        self, make_package, diagnostics
    ) -> None:
        bar = make_package("bar")
        foo = make_package("foo", dependencies={"bar": "^1.0.0"})
        ops: list[str] = []

        graph = DependencyGraph([bar, foo], on_diagnostic=diagnostics)
        await TaskScheduler(graph, on_diagnostic=diagnostics).run([foo], recording_task(ops))

        assert ops == ["start:foo", "end:foo"]

    async def test_self_reference_does_not_block(self, make_package, diagnostics) -> None:
        packages = [make_package("foo", devDependencies={"foo": "*"})]
        ops: list[str] = []

        await scheduler_for(packages, diagnostics).run(packages, recording_task(ops))

        assert ops == ["start:foo", "end:foo"]
        assert len(diagnostics) == 0

    async def test_concurrency_limit(self, make_package, diagnostics) -> None:
        packages = [make_package(f"pkg-{i}") for i in range(5)]
        active = 0
        peak = 0

        async def task(pkg: Package) -> None:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1

        await scheduler_for(packages, diagnostics, concurrency=2).run(packages, task)

        assert peak == 2

    async def test_no_graph_runs_everything_independently(self, make_package) -> None:
        packages = [
            make_package("bar"),
            make_package("foo", dependencies={"bar": "^1.0.0"}),
        ]
        ops: list[str] = []

        await TaskScheduler(None).run(packages, recording_task(ops))

        assert ops == ["start:bar", "start:foo", "end:bar", "end:foo"]


class TestCompleteness:
    """Every package runs exactly once."""

    async def test_each_package_invoked_once(self, make_package, diagnostics) -> None:
        packages = [
            make_package("a"),
            make_package("b", dependencies={"a": "*"}),
            make_package("c", dependencies={"a": "*", "b": "*"}),
            make_package("d"),
        ]
        calls: list[str] = []

        result = await scheduler_for(packages, diagnostics).run(
            packages, lambda pkg: calls.append(pkg.name)
        )

        assert sorted(calls) == ["a", "b", "c", "d"]
        assert result.all_success
        assert [r.package_name for r in result] == ["a", "b", "c", "d"]

    async def test_sync_task_return_value_is_kept(self, make_package, diagnostics) -> None:
        packages = [make_package("a", version="3.1.4")]

        result = await scheduler_for(packages, diagnostics).run(packages, lambda pkg: pkg.version)

        assert result.get("a").value == "3.1.4"

    async def test_duplicate_entries_run_once(self, make_package, diagnostics) -> None:
        pkg = make_package("a")
        calls: list[str] = []

        result = await scheduler_for([pkg], diagnostics).run(
            [pkg, pkg], lambda p: calls.append(p.name)
        )

        assert calls == ["a"]
        assert len(result) == 1

    async def test_states_end_terminal(self, make_package, diagnostics) -> None:
        packages = [make_package("a"), make_package("b", dependencies={"a": "*"})]
        scheduler = scheduler_for(packages, diagnostics)

        await scheduler.run(packages, lambda pkg: None)

        assert scheduler.states == {"a": ExecutionStatus.SUCCESS, "b": ExecutionStatus.SUCCESS}

    async def test_empty_run(self, diagnostics) -> None:
        result = await TaskScheduler(DependencyGraph([]), on_diagnostic=diagnostics).run(
            [], lambda pkg: None
        )

        assert len(result) == 0
        assert result.all_success


class TestCycles:
    """Cycle detection and tie-breaking."""

    async def test_two_package_cycle_completes(self, make_package, diagnostics) -> None:
        packages = [
            make_package("bar", dependencies={"foo": "^1.0.0"}),
            make_package("foo", dependencies={"bar": "^1.0.0"}),
        ]
        ops: list[str] = []

        await scheduler_for(packages, diagnostics).run(packages, recording_task(ops))

        assert ops == ["start:bar", "end:bar", "start:foo", "end:foo"]
        cycles = diagnostics.of_kind(DiagnosticKind.SCHEDULING_CYCLE)
        assert len(cycles) == 1
        assert "bar -> foo -> bar" in cycles[0].message
        assert cycles[0].packages == ("bar", "foo")

    async def test_three_package_cycle_keeps_other_edges(self, make_package, diagnostics) -> None:
        packages = [
            make_package("a", dependencies={"c": "*"}),
            make_package("b", dependencies={"a": "*"}),
            make_package("c", dependencies={"b": "*"}),
        ]
        ops: list[str] = []

        await scheduler_for(packages, diagnostics).run(packages, recording_task(ops))

        assert ops == ["start:a", "end:a", "start:b", "end:b", "start:c", "end:c"]
        assert len(diagnostics.of_kind(DiagnosticKind.SCHEDULING_CYCLE)) == 1

    async def test_cycle_does_not_hold_up_independent_work(self, make_package, diagnostics) -> None:
        packages = [
            make_package("solo"),
            make_package("x", devDependencies={"y": "*"}),
            make_package("y", devDependencies={"x": "*"}),
        ]
        ops: list[str] = []

        await scheduler_for(packages, diagnostics).run(packages, recording_task(ops))

        assert ops.index("start:x") < ops.index("end:solo")
        assert ops.index("end:x") < ops.index("start:y")

    async def test_package_behind_a_cycle_waits_for_it(self, make_package, diagnostics) -> None:
        packages = [
            make_package("app", dependencies={"x": "*"}),
            make_package("x", dependencies={"y": "*"}),
            make_package("y", dependencies={"x": "*"}),
        ]
        ops: list[str] = []

        await scheduler_for(packages, diagnostics).run(packages, recording_task(ops))

        assert ops == ["start:x", "end:x", "start:y", "end:y", "start:app", "end:app"]
        assert len(diagnostics.of_kind(DiagnosticKind.SCHEDULING_CYCLE)) == 1

    async def test_two_separate_cycles_warn_twice(self, make_package, diagnostics) -> None:
        packages = [
            make_package("a", dependencies={"b": "*"}),
            make_package("b", dependencies={"a": "*"}),
            make_package("c", dependencies={"d": "*"}),
            make_package("d", dependencies={"c": "*"}),
        ]

        result = await scheduler_for(packages, diagnostics).run(packages, lambda pkg: None)

        assert result.all_success
        cycles = diagnostics.of_kind(DiagnosticKind.SCHEDULING_CYCLE)
        assert [c.packages[0] for c in cycles] == ["a", "c"]

    async def test_cycle_outside_the_run_is_not_reported(self, make_package, diagnostics) -> None:
        bar = make_package("bar", dependencies={"foo": "*"})
        foo = make_package("foo", dependencies={"bar": "*"})
        graph = DependencyGraph([bar, foo], on_diagnostic=diagnostics)

        await TaskScheduler(graph, on_diagnostic=diagnostics).run([foo], lambda pkg: None)

        assert len(diagnostics) == 0


class TestFailures:
    """Failure propagation."""

    async def test_failure_raises_after_everything_settles(self, make_package, diagnostics) -> None:
        packages = [make_package("bad"), make_package("good")]
        calls: list[str] = []

        def task(pkg: Package) -> None:
            calls.append(pkg.name)
            if pkg.name == "bad":
                raise RuntimeError("boom")

        with pytest.raises(TaskExecutionError) as exc_info:
            await scheduler_for(packages, diagnostics).run(packages, task)

        assert calls == ["bad", "good"]
        assert exc_info.value.package_name == "bad"
        assert "boom" in exc_info.value.message
        assert exc_info.value.batch.get("good").success

    async def test_dependents_of_failure_are_skipped(self, make_package, diagnostics) -> None:
        packages = [
            make_package("base"),
            make_package("mid", dependencies={"base": "*"}),
            make_package("top", dependencies={"mid": "*"}),
            make_package("other"),
        ]
        calls: list[str] = []

        async def task(pkg: Package) -> None:
            calls.append(pkg.name)
            if pkg.name == "base":
                raise ValueError("broken build")

        result = await scheduler_for(packages, diagnostics).run(
            packages, task, raise_on_failure=False
        )

        assert sorted(calls) == ["base", "other"]
        assert result.get("base").status == ExecutionStatus.FAILURE
        assert result.get("mid").status == ExecutionStatus.SKIPPED
        assert result.get("top").status == ExecutionStatus.SKIPPED
        assert result.get("other").success
        assert "base" in result.get("mid").stderr

    async def test_returned_failure_result_counts_as_failure(
        self, make_package, diagnostics
    ) -> None:
        packages = [make_package("a"), make_package("b", dependencies={"a": "*"})]

        def task(pkg: Package) -> ExecutionResult:
            return ExecutionResult.failure_result(pkg.name, exit_code=2)

        result = await scheduler_for(packages, diagnostics).run(
            packages, task, raise_on_failure=False
        )

        assert result.failure_count == 1
        assert result.get("a").exit_code == 2
        assert result.get("b").status == ExecutionStatus.SKIPPED

    async def test_fail_fast_cancels_unstarted_packages(self, make_package, diagnostics) -> None:
        packages = [
            make_package("bad"),
            make_package("after", dependencies={"slow": "*"}),
            make_package("slow"),
        ]

        async def task(pkg: Package) -> None:
            if pkg.name == "bad":
                raise RuntimeError("boom")
            await asyncio.sleep(0.01)

        result = await scheduler_for(packages, diagnostics, fail_fast=True).run(
            packages, task, raise_on_failure=False
        )

        assert result.get("bad").failed
        assert result.get("slow").success
        assert result.get("after").status == ExecutionStatus.CANCELLED

    async def test_cancel_lets_running_tasks_finish(self, make_package, diagnostics) -> None:
        packages = [make_package("first"), make_package("second", dependencies={"first": "*"})]
        scheduler = scheduler_for(packages, diagnostics)

        async def task(pkg: Package) -> None:
            scheduler.cancel()
            await asyncio.sleep(0)

        result = await scheduler.run(packages, task)

        assert result.get("first").success
        assert result.get("second").status == ExecutionStatus.CANCELLED

    async def test_task_cancelling_itself_only_stops_its_package(
        self, make_package, diagnostics
    ) -> None:
        packages = [
            make_package("quits"),
            make_package("after", dependencies={"quits": "*"}),
            make_package("other"),
        ]

        async def task(pkg: Package) -> None:
            if pkg.name == "quits":
                raise asyncio.CancelledError
            await asyncio.sleep(0)

        result = await scheduler_for(packages, diagnostics).run(packages, task)

        assert result.get("quits").status == ExecutionStatus.CANCELLED
        assert result.get("after").status == ExecutionStatus.SKIPPED
        assert result.get("other").success


async def test_run_workspace_tasks(workspace_dir, diagnostics) -> None:
    from tandem.execution.scheduler import run_workspace_tasks
    from tandem.workspace.workspace import Workspace

    workspace = Workspace.discover(workspace_dir, on_diagnostic=diagnostics)
    ops: list[str] = []

    result = await run_workspace_tasks(workspace, None, recording_task(ops), concurrency=1)

    assert ops == [
        "start:pkg-a",
        "end:pkg-a",
        "start:pkg-b",
        "end:pkg-b",
        "start:pkg-c",
        "end:pkg-c",
    ]
    assert result.all_success
