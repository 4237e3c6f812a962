import re

import pytest

from asyncdemos import blocking_compare as bc

LINE = re.compile(r"^\[(\w+)\] \+ *(\d+)ms task (\d+) iteration (\d+) \(before ([\w.]+)\)$")
TOTAL = bc.TASKS * bc.ITERATIONS
SERIAL_TIME = TOTAL * bc.PAUSE


def _parse(out):
    return [
        (label, int(ms), int(task), int(iteration), how)
        for label, ms, task, iteration, how in (
            match.groups() for match in map(LINE.match, out.splitlines()) if match
        )
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("runner", [bc.run_blocking_sleep, bc.run_async_sleep, bc.run_spawn_blocking])
async def test_every_iteration_is_reported_in_time_order(runner, capsys):
    await runner("lbl")
    lines = _parse(capsys.readouterr().out)
    assert len(lines) == TOTAL
    assert {label for label, *_ in lines} == {"lbl"}
    assert sorted((task, iteration) for _, _, task, iteration, _ in lines) == [
        (task, iteration) for task in range(bc.TASKS) for iteration in range(bc.ITERATIONS)
    ]
    times = [ms for _, ms, *_ in lines]
    assert times == sorted(times)


@pytest.mark.asyncio
async def test_blocking_sleep_runs_tasks_one_after_another(capsys):
    elapsed = await bc.run_blocking_sleep("x")
    lines = _parse(capsys.readouterr().out)
    assert elapsed >= SERIAL_TIME
    tasks = [task for _, _, task, _, _ in lines]
    assert tasks == sorted(tasks)


@pytest.mark.asyncio
async def test_async_sleep_interleaves_tasks(capsys):
    elapsed = await bc.run_async_sleep("y")
    lines = _parse(capsys.readouterr().out)
    assert bc.ITERATIONS * bc.PAUSE <= elapsed < SERIAL_TIME
    iterations = [iteration for _, _, _, iteration, _ in lines]
    assert iterations == sorted(iterations)


@pytest.mark.asyncio
async def test_spawn_blocking_overlaps_sleeps(capsys):
    elapsed = await bc.run_spawn_blocking("z")
    lines = _parse(capsys.readouterr().out)
    assert elapsed < SERIAL_TIME
    assert {how for *_, how in lines} == {"asyncio.to_thread"}


@pytest.mark.parametrize(
    "runtime, heading, label",
    [
        (bc.run_multithread_runtime, "=== RUN 1:", "multithread"),
        (bc.run_current_thread_runtime, "=== RUN 4: current_thread runtime comparison ===", "current_thread"),
    ],
)
def test_runtime_output(runtime, heading, label, capsys):
    runtime()
    out = capsys.readouterr().out
    assert heading in out
    lines = _parse(out)
    assert len(lines) == 3 * TOTAL
    assert {found for found, *_ in lines} == {label}