"""A TCP server that answers a small set of text commands."""

from __future__ import annotations

import asyncio

from .echo import (
    BUFFER_SIZE,
    HOST,
    PORT,
    _argument_parser,
    _bound_port,
    _connection,
    _decode,
    _served,
)

CALCULATION_DELAY = 0.25
STARTUP_DELAY = 0.25

CALCULATION_REPLY = b"Calculation complete!\n"
HELLO_REPLY = b"Hello to you too!\n"

# Command name -> (seconds of work before replying, reply).
_COMMANDS = {
    "calculate": (CALCULATION_DELAY, CALCULATION_REPLY),
    "hello": (0.0, HELLO_REPLY),
}


async def handle_commands(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    """Answer each command read from the peer, one at a time, until it disconnects."""
    with _served(writer):
        while data := await reader.read(BUFFER_SIZE):
            known = _COMMANDS.get(_decode(data).strip().lower())
            if known is None:
                continue
            delay, reply = known
            if delay:
                await asyncio.sleep(delay)
            writer.write(reply)
            await writer.drain()


async def serve(host: str = HOST, port: int = PORT) -> asyncio.Server:
    """Start a command server listening on ``host``:``port`` and return it."""
    return await asyncio.start_server(handle_commands, host, port)


async def client(host: str = HOST, port: int = PORT) -> list[str]:
    """Send ``calculate`` then ``hello`` and return the two replies."""
    replies = []
    async with _connection(host, port) as (reader, writer):
        for command in (b"calculate", b"hello"):
            writer.write(command)
            await writer.drain()
            replies.append(_decode(await reader.read(BUFFER_SIZE)))
            print(f"Received: {replies[-1]}")
    return replies


async def _main(host: str, port: int) -> None:
    async with await serve(host, port) as server:
        await asyncio.sleep(STARTUP_DELAY)
        await client(host, _bound_port(server))


def main(argv: list[str] | None = None) -> int:
    args = _argument_parser("Run a command server and a client.").parse_args(argv)
    asyncio.run(_main(args.host, args.port))
    return 0