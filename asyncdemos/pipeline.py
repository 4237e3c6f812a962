"""A producer / batcher / consumer pipeline that shows back-pressure on bounded channels."""

from __future__ import annotations

import argparse
import asyncio
import time
from contextlib import suppress
from dataclasses import dataclass, field
from enum import Enum

from asyncdemos.channel import Channel, ChannelClosed

PRODUCER_CHANNEL_SIZE = 500_000
BATCH_CHANNEL_SIZE = 500_000
NUM_PRODUCERS = 5
NUM_LEVEL1_PROCESSORS = 4
NUM_LEVEL2_PROCESSORS = 1
INITIAL_BATCH_SIZE = 32
PERFORMANCE_SLOTS = 128

PRODUCER_REPORT_INTERVAL = 0.1
PROCESSOR_REPORT_INTERVAL = 0.25
MONITOR_INTERVAL = 0.25

_U64_MASK = (1 << 64) - 1


class ReportKind(Enum):
    PRODUCER = "producer"
    LAYER1 = "layer1"
    LAYER2 = "layer2"


@dataclass(frozen=True)
class Report:
    """A throughput measurement from one stage of the pipeline."""

    kind: ReportKind
    id: int
    messages_per_second: float


@dataclass
class PipelineState:
    """Tunable settings and the latest measurements of a running pipeline."""

    batch_size: int = INITIAL_BATCH_SIZE
    processing_delay_tenths: int = 0
    producer_performance: list[int] = field(default_factory=lambda: [0] * PERFORMANCE_SLOTS)
    layer1_performance: list[int] = field(default_factory=lambda: [0] * PERFORMANCE_SLOTS)
    layer2_performance: list[int] = field(default_factory=lambda: [0] * PERFORMANCE_SLOTS)
    producer_percent: int = 0
    layer1_percent: int = 0


def next_value(counter: int) -> int:
    """Step the producers' linear congruential generator, wrapping at 64 bits."""
    return (counter * 1103515245 + 12345) & _U64_MASK


async def _report(report: Channel[Report], kind: ReportKind, id: int, count: int, started: float) -> None:
    elapsed = time.monotonic() - started
    with suppress(ChannelClosed):
        await report.send(Report(kind, id, count / elapsed))


async def producer_task(id: int, tx: Channel[int], report: Channel[Report], state: PipelineState) -> None:
    """Send values as fast as the channel takes them, reporting the rate."""
    counter = id
    started = time.monotonic()
    count = 0
    while True:
        counter = next_value(counter)
        try:
            await tx.send(counter)
        except ChannelClosed:
            break
        count += 1
        if time.monotonic() - started >= PRODUCER_REPORT_INTERVAL:
            await _report(report, ReportKind.PRODUCER, id, count, started)
            count = 0
            started = time.monotonic()
        # A send with room never suspends, so give the other tasks a turn.
        await asyncio.sleep(0)


async def processor_1(
    id: int,
    input: Channel[int],
    output: Channel[list[int]],
    report: Channel[Report],
    state: PipelineState,
) -> None:
    """Collect values into batches of ``state.batch_size`` and pass them on."""
    batch: list[int] = []
    started = time.monotonic()
    count = 0
    while True:
        try:
            data = await input.recv()
        except ChannelClosed:
            break
        count += 1
        batch.append(data)
        if len(batch) >= state.batch_size:
            try:
                await output.send(batch)
            except ChannelClosed:
                break
            batch = []
        if time.monotonic() - started >= PROCESSOR_REPORT_INTERVAL:
            await _report(report, ReportKind.LAYER1, id, count, started)
            count = 0
            started = time.monotonic()
        await asyncio.sleep(0)
    print("Layer 1 processor exiting")


async def processor_layer2(
    input: Channel[list[int]], report: Channel[Report], state: PipelineState
) -> None:
    """Consume batches, spending the configured delay on each one."""
    started = time.monotonic()
    count = 0
    while True:
        try:
            await input.recv()
        except ChannelClosed:
            break
        await asyncio.sleep(state.processing_delay_tenths / 10)
        count += 1
        if time.monotonic() - started >= PROCESSOR_REPORT_INTERVAL:
            await _report(report, ReportKind.LAYER2, 0, count, started)
            count = 0
            started = time.monotonic()
    print("Layer 2 processor exiting")


async def reporter_task(report_rx: Channel[Report], state: PipelineState) -> None:
    """Record each report's rate, truncated to whole messages, until the channel closes."""
    tables = {
        ReportKind.PRODUCER: state.producer_performance,
        ReportKind.LAYER1: state.layer1_performance,
        ReportKind.LAYER2: state.layer2_performance,
    }
    async for report in report_rx:
        tables[report.kind][report.id] = int(report.messages_per_second)


def _percent_full(channel: Channel) -> int:
    return int(len(channel) / (channel.capacity() or 1) * 100)


async def capacity_monitor(
    producer_channel: Channel, level1_channel: Channel, state: PipelineState
) -> None:
    """Keep the state's queue fill percentages up to date until cancelled."""
    while True:
        state.producer_percent = _percent_full(producer_channel)
        state.layer1_percent = _percent_full(level1_channel)
        await asyncio.sleep(MONITOR_INTERVAL)


async def run(duration: float = 5.0) -> PipelineState:
    """Run the whole pipeline for ``duration`` seconds, shut it down, and return its state."""
    state = PipelineState()
    producer_channel: Channel[int] = Channel(PRODUCER_CHANNEL_SIZE)
    report_channel: Channel[Report] = Channel()
    level1_channel: Channel[list[int]] = Channel(BATCH_CHANNEL_SIZE)

    reporter = asyncio.create_task(reporter_task(report_channel, state))
    producers = [
        asyncio.create_task(producer_task(i, producer_channel, report_channel, state))
        for i in range(NUM_PRODUCERS)
    ]
    batchers = [
        asyncio.create_task(processor_1(i, producer_channel, level1_channel, report_channel, state))
        for i in range(NUM_LEVEL1_PROCESSORS)
    ]
    consumers = [
        asyncio.create_task(processor_layer2(level1_channel, report_channel, state))
        for _ in range(NUM_LEVEL2_PROCESSORS)
    ]
    monitor = asyncio.create_task(capacity_monitor(producer_channel, level1_channel, state))

    try:
        await asyncio.sleep(duration)
    finally:
        producer_channel.close()
        await asyncio.gather(*producers, *batchers)
        level1_channel.close()
        await asyncio.gather(*consumers)
        report_channel.close()
        await reporter
        monitor.cancel()
        with suppress(asyncio.CancelledError):
            await monitor
    return state


def _print_summary(state: PipelineState) -> None:
    for i in range(NUM_PRODUCERS):
        print(f"Producer #{i}: Messages per second: {state.producer_performance[i]}")
    for i in range(NUM_LEVEL1_PROCESSORS):
        print(f"Batch Combiner #{i}: Messages per second: {state.layer1_performance[i]}")
    for i in range(NUM_LEVEL2_PROCESSORS):
        print(f"Layer 2 Processor #{i}: Messages per second: {state.layer2_performance[i]}")
    print(f"Producer queue: {state.producer_percent}% full")
    print(f"Processor queue: {state.layer1_percent}% full")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the back-pressure pipeline.")
    parser.add_argument("--duration", type=float, default=5.0, help="seconds to run")
    args = parser.parse_args(argv)
    _print_summary(asyncio.run(run(args.duration)))
    return 0