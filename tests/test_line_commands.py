import asyncio

import pytest
import pytest_asyncio

from asyncdemos import line_commands

LOCAL = "127.0.0.1"


@pytest_asyncio.fixture
async def line_port():
    server = await line_commands.serve(LOCAL, 0)
    async with server:
        yield server.sockets[0].getsockname()[1]


@pytest.mark.asyncio
async def test_calculator_task_queues_reply():
    replies = asyncio.Queue()
    await line_commands.calculator_task(replies)
    assert replies.get_nowait() == line_commands.CALCULATION_REPLY
    assert replies.empty()


@pytest.mark.asyncio
async def test_client_gets_fast_reply_before_slow_one(line_port):
    replies = await asyncio.wait_for(line_commands.client(LOCAL, line_port), 5)
    assert replies == [line_commands.HELLO_REPLY, line_commands.CALCULATION_REPLY]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, expected",
    [
        (b"bogus\n  HeLLo  \n", line_commands.HELLO_REPLY),
        (b"", ""),
        (b"calculate\ncalculate\n", line_commands.CALCULATION_REPLY * 2),
    ],
    ids=["unknown-ignored-and-case-folded", "eof-without-commands", "pending-sent-before-close"],
)
async def test_everything_is_answered_before_close(line_port, payload, expected):
    reader, writer = await asyncio.open_connection(LOCAL, line_port)
    writer.write(payload)
    await writer.drain()
    writer.write_eof()
    data = await asyncio.wait_for(reader.read(), 5)
    writer.close()
    assert data.decode() == expected