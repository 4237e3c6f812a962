"""Shows how blocking sleeps stall an event loop, and how to avoid it."""

from __future__ import annotations

import argparse
import asyncio
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Awaitable, Callable

TASKS = 3
ITERATIONS = 3
PAUSE = 0.06
WORKER_THREADS = 2


def _announce(label: str, start: float, n: int, i: int, how: str) -> None:
    elapsed_ms = int((time.monotonic() - start) * 1000)
    print(f"[{label}] +{elapsed_ms:>4}ms task {n} iteration {i} (before {how})")


async def blocking_looper(n: int, start: float, label: str) -> None:
    """Loop with a blocking sleep, which holds up every other task."""
    for i in range(ITERATIONS):
        _announce(label, start, n, i, "time.sleep")
        time.sleep(PAUSE)


async def async_looper(n: int, start: float, label: str) -> None:
    """Loop with an awaited sleep, letting other tasks run meanwhile."""
    for i in range(ITERATIONS):
        _announce(label, start, n, i, "asyncio.sleep")
        await asyncio.sleep(PAUSE)


async def looper_with_spawn_blocking(n: int, start: float, label: str) -> None:
    """Loop with the blocking sleep moved onto a worker thread."""
    for i in range(ITERATIONS):
        _announce(label, start, n, i, "asyncio.to_thread")
        await asyncio.to_thread(time.sleep, PAUSE)


async def _run_all(
    looper: Callable[[int, float, str], Awaitable[None]], label: str
) -> float:
    start = time.monotonic()
    await asyncio.gather(*(looper(n, start, label) for n in range(TASKS)))
    return time.monotonic() - start


async def run_blocking_sleep(label: str) -> float:
    """Run the blocking loopers together; return the seconds taken."""
    return await _run_all(blocking_looper, label)


async def run_async_sleep(label: str) -> float:
    """Run the awaiting loopers together; return the seconds taken."""
    return await _run_all(async_looper, label)


async def run_spawn_blocking(label: str) -> float:
    """Run the thread-offloading loopers together; return the seconds taken."""
    return await _run_all(looper_with_spawn_blocking, label)


def run_multithread_runtime() -> None:
    """Run all three comparisons with a small pool of worker threads."""

    async def body() -> None:
        asyncio.get_running_loop().set_default_executor(
            ThreadPoolExecutor(max_workers=WORKER_THREADS)
        )
        print("=== RUN 1: BAD - time.sleep in async code ===")
        await run_blocking_sleep("multithread")

        print("\n=== RUN 2: GOOD - await asyncio.sleep() ===")
        await run_async_sleep("multithread")

        print("\n=== RUN 3: GOOD - move blocking work to a thread ===")
        await run_spawn_blocking("multithread")

    asyncio.run(body())


def run_current_thread_runtime() -> None:
    """Run all three comparisons on a plain event loop."""

    async def body() -> None:
        print("\n=== RUN 4: current_thread runtime comparison ===")
        print("-- current_thread + time.sleep (bad) --")
        await run_blocking_sleep("current_thread")

        print("\n-- current_thread + asyncio.sleep (good) --")
        await run_async_sleep("current_thread")

        print("\n-- current_thread + asyncio.to_thread (good) --")
        await run_spawn_blocking("current_thread")

    asyncio.run(body())


def main(argv: list[str] | None = None) -> int:
    argparse.ArgumentParser(
        description="Compare blocking and non-blocking sleeps in async code."
    ).parse_args(argv)
    run_multithread_runtime()
    run_current_thread_runtime()
    return 0