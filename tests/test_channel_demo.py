import pytest

from asyncdemos.channel_demo import BUFFER_SIZE, main, run


@pytest.mark.asyncio
async def test_messages_arrive_in_order():
    received = await run(10)
    assert received == [f"Message {i}" for i in range(10)]


@pytest.mark.asyncio
async def test_more_messages_than_buffer():
    count = BUFFER_SIZE * 3 + 1
    received = await run(count)
    assert len(received) == count
    assert received[-1] == f"Message {count - 1}"


@pytest.mark.asyncio
async def test_no_messages():
    assert await run(0) == []


@pytest.mark.asyncio
async def test_prints_each_message(capsys):
    await run(3)
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["Received: Message 0", "Received: Message 1", "Received: Message 2"]


def test_main_sends_ten_by_default(capsys):
    assert main([]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 10
    assert lines[0] == "Received: Message 0"
    assert lines[-1] == "Received: Message 9"