"""A line-based TCP command server whose slow replies never block fast ones."""

from __future__ import annotations

import argparse
import asyncio
import sys

HOST = "127.0.0.1"
PORT = 3001
REPLY_QUEUE_SIZE = 32
CALCULATION_DELAY = 0.25
STARTUP_DELAY = 0.1
CLIENT_PAUSE = 0.05

CALCULATION_REPLY = "Calculation complete!\n"
HELLO_REPLY = "Hello to you too!\n"


async def calculator_task(replies: asyncio.Queue) -> None:
    """Simulate a long calculation, then queue its reply."""
    await asyncio.sleep(CALCULATION_DELAY)
    await replies.put(CALCULATION_REPLY)


async def handle_connection(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    """Read commands line by line; replies go out through a queue as they are ready."""
    replies: asyncio.Queue = asyncio.Queue(REPLY_QUEUE_SIZE)

    async def write_replies() -> None:
        while (message := await replies.get()) is not None:
            print(f"Server sending: {message.strip()}")
            try:
                writer.write(message.encode())
                await writer.drain()
            except ConnectionError as error:
                print(f"Write error: {error}", file=sys.stderr)
                break

    write_task = asyncio.create_task(write_replies())
    calculations: set[asyncio.Task] = set()
    try:
        while line := await reader.readline():
            command = line.decode("utf-8", errors="replace").strip().lower()
            if command == "calculate":
                print("Server received: calculate")
                task = asyncio.create_task(calculator_task(replies))
                calculations.add(task)
                task.add_done_callback(calculations.discard)
            elif command == "hello":
                print("Server received: hello")
                await replies.put(HELLO_REPLY)
            else:
                print(f"Server received unknown command: {command}")
    finally:
        if calculations:
            await asyncio.gather(*calculations, return_exceptions=True)
        if not write_task.done():
            await replies.put(None)
        await write_task
        writer.close()


async def serve(host: str = HOST, port: int = PORT) -> asyncio.Server:
    """Start the command server on ``host``:``port`` and return it."""
    server = await asyncio.start_server(handle_connection, host, port)
    print(f"Server listening on {host}:{port}")
    return server


async def client(host: str = HOST, port: int = PORT) -> list[str]:
    """Send ``calculate`` then ``hello`` and return every reply line in arrival order."""
    reader, writer = await asyncio.open_connection(host, port)
    received: list[str] = []

    async def read_replies() -> None:
        while line := await reader.readline():
            text = line.decode("utf-8", errors="replace")
            print(f"Client received: {text}", end="")
            received.append(text)

    async def send_commands() -> None:
        writer.write(b"calculate\n")
        await writer.drain()
        print("Client sent: calculate")
        await asyncio.sleep(CLIENT_PAUSE)
        writer.write(b"hello\n")
        await writer.drain()
        print("Client sent: hello")
        writer.write_eof()

    try:
        await asyncio.gather(read_replies(), send_commands())
    finally:
        writer.close()
        await writer.wait_closed()
    return received


async def _main(host: str, port: int) -> None:
    server = await serve(host, port)
    async with server:
        await asyncio.sleep(STARTUP_DELAY)
        await client(host, server.sockets[0].getsockname()[1])


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run a line command server and a client.")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    args = parser.parse_args(argv)
    asyncio.run(_main(args.host, args.port))
    return 0