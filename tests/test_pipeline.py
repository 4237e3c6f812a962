import asyncio

import pytest

from asyncdemos.channel import Channel
from asyncdemos.pipeline import (
    NUM_PRODUCERS,
    PipelineState,
    Report,
    ReportKind,
    capacity_monitor,
    next_value,
    processor_1,
    processor_layer2,
    producer_task,
    reporter_task,
    run,
)


def test_next_value_from_zero_is_increment():
    assert next_value(0) == 12345


def test_next_value_wraps_to_64_bits():
    value = next_value(2**64 - 1)
    assert 0 <= value < 2**64


def test_state_defaults_match_source():
    state = PipelineState()
    assert state.batch_size == 32
    assert len(state.producer_performance) == 128
    assert state.processing_delay_tenths == 0


@pytest.mark.asyncio
async def test_producer_sends_generator_sequence_and_stops_on_close():
    tx = Channel(3)
    report = Channel()
    task = asyncio.create_task(producer_task(2, tx, report, PipelineState()))
    received = [await tx.recv() for _ in range(3)]
    first = next_value(2)
    second = next_value(first)
    assert received == [first, second, next_value(second)]
    tx.close()
    await asyncio.wait_for(task, 1)
    assert task.done()


@pytest.mark.asyncio
async def test_processor_1_emits_full_batches_in_order():
    source = Channel()
    output = Channel()
    values = list(range(64))
    for value in values:
        await source.send(value)
    source.close()
    state = PipelineState()
    await asyncio.wait_for(processor_1(0, source, output, Channel(), state), 2)
    batches = [await output.recv() for _ in range(len(output))]
    assert [len(batch) for batch in batches] == [state.batch_size, state.batch_size]
    assert [v for batch in batches for v in batch] == values


@pytest.mark.asyncio
async def test_processor_1_holds_back_partial_batch():
    source = Channel()
    output = Channel()
    for value in range(5):
        await source.send(value)
    source.close()
    await asyncio.wait_for(processor_1(0, source, output, Channel(), PipelineState()), 2)
    assert len(output) == 0
    assert len(source) == 0


@pytest.mark.asyncio
async def test_processor_1_respects_batch_size_setting():
    source = Channel()
    output = Channel()
    for value in range(6):
        await source.send(value)
    source.close()
    state = PipelineState(batch_size=3)
    await asyncio.wait_for(processor_1(0, source, output, Channel(), state), 2)
    assert [await output.recv(), await output.recv()] == [[0, 1, 2], [3, 4, 5]]


@pytest.mark.asyncio
async def test_processor_layer2_drains_and_reports_with_delay():
    source = Channel()
    for _ in range(3):
        await source.send([1, 2, 3])
    source.close()
    report = Channel()
    state = PipelineState(processing_delay_tenths=1)
    await asyncio.wait_for(processor_layer2(source, report, state), 3)
    assert len(source) == 0
    first = await report.recv()
    assert first.kind is ReportKind.LAYER2
    assert first.id == 0
    assert first.messages_per_second > 0


@pytest.mark.asyncio
async def test_reporter_records_truncated_rates():
    report = Channel()
    await report.send(Report(ReportKind.PRODUCER, 2, 10.7))
    await report.send(Report(ReportKind.LAYER1, 1, 5.0))
    await report.send(Report(ReportKind.LAYER2, 0, 3.9))
    report.close()
    state = PipelineState()
    await asyncio.wait_for(reporter_task(report, state), 1)
    assert state.producer_performance[2] == 10
    assert state.layer1_performance[1] == 5
    assert state.layer2_performance[0] == 3
    assert state.producer_performance[0] == 0


@pytest.mark.asyncio
async def test_capacity_monitor_sets_percentages():
    producer_channel = Channel(4)
    level1_channel = Channel(10)
    await producer_channel.send(1)
    await producer_channel.send(2)
    await level1_channel.send([1])
    state = PipelineState()
    task = asyncio.create_task(capacity_monitor(producer_channel, level1_channel, state))
    await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert state.producer_percent == 50
    assert state.layer1_percent == 10


@pytest.mark.asyncio
async def test_run_measures_producers_only_in_their_slots():
    state = await asyncio.wait_for(run(0.5), 30)
    assert all(rate > 0 for rate in state.producer_performance[:NUM_PRODUCERS])
    assert all(rate == 0 for rate in state.producer_performance[NUM_PRODUCERS:])
    assert 0 <= state.producer_percent <= 100