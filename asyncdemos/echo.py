"""A TCP echo server and clients that talk to it."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
from collections.abc import AsyncIterator, Iterator

HOST = "127.0.0.1"
PORT = 3001
BUFFER_SIZE = 1024
MESSAGE = b"Hello, world!"


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _bound_port(server: asyncio.Server) -> int:
    return server.sockets[0].getsockname()[1]


def _argument_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    return parser


@contextlib.contextmanager
def _served(writer: asyncio.StreamWriter) -> Iterator[None]:
    """Close ``writer`` when the session ends; a vanished peer ends it quietly."""
    try:
        yield
    except ConnectionError:
        pass
    finally:
        writer.close()


@contextlib.asynccontextmanager
async def _connection(
    host: str, port: int
) -> AsyncIterator[tuple[asyncio.StreamReader, asyncio.StreamWriter]]:
    reader, writer = await asyncio.open_connection(host, port)
    try:
        yield reader, writer
    finally:
        writer.close()
        await writer.wait_closed()


async def handle_echo(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    """Send back whatever the peer sends until it disconnects."""
    print("Client connected. Waiting for messages... ", end="", flush=True)
    with _served(writer):
        while data := await reader.read(BUFFER_SIZE):
            writer.write(data)
            await writer.drain()
        print("Client disconnected. ", end="", flush=True)


async def serve(host: str = HOST, port: int = PORT) -> asyncio.Server:
    """Start an echo server listening on ``host``:``port`` and return it."""
    return await asyncio.start_server(handle_echo, host, port)


async def client(host: str = HOST, port: int = PORT, message: bytes = MESSAGE) -> str:
    """Send ``message`` to the server and return what it sends back."""
    async with _connection(host, port) as (reader, writer):
        writer.write(message)
        await writer.drain()
        print("Connected to server. Sending message... ", end="", flush=True)
        reply = _decode(await reader.read(BUFFER_SIZE))
    print(f"Received: {reply}")
    return reply


async def run_many(count: int = 500, host: str = HOST, port: int = PORT) -> list[str]:
    """Run ``count`` clients at once and return their replies."""
    return list(await asyncio.gather(*(client(host, port) for _ in range(count))))


async def _main(host: str, port: int, clients: int) -> None:
    async with await serve(host, port) as server:
        if clients == 1:
            await client(host, _bound_port(server))
        else:
            await run_many(clients, host, _bound_port(server))


def main(argv: list[str] | None = None) -> int:
    parser = _argument_parser("Run an echo server and its clients.")
    parser.add_argument("--clients", type=int, default=1, help="number of clients to run")
    args = parser.parse_args(argv)
    asyncio.run(_main(args.host, args.port, args.clients))
    return 0