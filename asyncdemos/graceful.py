"""An echo server that stops accepting on a signal and lets connections finish."""

from __future__ import annotations

import argparse
import asyncio
import socket
import sys

HOST = "127.0.0.1"
PORT = 3011
BUFFER_SIZE = 1024
WRITE_TIMEOUT = 2.0
STARTUP_DELAY = 0.15

SHUTDOWN_NOTICE = b"server shutting down\n"


class Shutdown:
    """A one-shot signal that every waiter sees once it is triggered."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def triggered(self) -> bool:
        return self._event.is_set()

    def trigger(self) -> None:
        """Tell every waiter to shut down."""
        self._event.set()

    async def wait(self) -> None:
        """Wait until the signal has been triggered."""
        await self._event.wait()


async def handle_connection(
    reader: asyncio.StreamReader, writer: asyncio.StreamWriter, shutdown: Shutdown
) -> None:
    """Echo data back until the peer leaves or shutdown is signalled."""
    stop = asyncio.ensure_future(shutdown.wait())
    read: asyncio.Future | None = None
    try:
        while True:
            read = asyncio.ensure_future(reader.read(BUFFER_SIZE))
            await asyncio.wait({stop, read}, return_when=asyncio.FIRST_COMPLETED)
            if stop.done():
                writer.write(SHUTDOWN_NOTICE)
                await writer.drain()
                return
            try:
                data = read.result()
            except OSError as error:
                raise ConnectionResetError(f"read failed: {error}") from error
            if not data:
                return
            writer.write(data)
            try:
                await asyncio.wait_for(writer.drain(), WRITE_TIMEOUT)
            except asyncio.TimeoutError as error:
                raise TimeoutError(f"write timeout: {error}") from error
    finally:
        stop.cancel()
        if read is not None:
            read.cancel()
        writer.close()


async def run_server(server_socket: socket.socket, shutdown: Shutdown) -> None:
    """Serve on ``server_socket`` until shutdown, then wait for open connections."""
    connections: set[asyncio.Task] = set()

    async def on_connect(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        task = asyncio.current_task()
        connections.add(task)
        peer = writer.get_extra_info("peername")
        print(f"[server] accepted {peer}")
        try:
            await handle_connection(reader, writer, shutdown)
        except OSError as error:
            print(f"[server] connection {peer} error: {error}", file=sys.stderr)
        finally:
            connections.discard(task)

    server = await asyncio.start_server(on_connect, sock=server_socket)
    await shutdown.wait()
    print("[server] shutdown requested")
    server.close()

    print("[server] waiting for active connections to finish")
    for result in await asyncio.gather(*connections, return_exceptions=True):
        if isinstance(result, BaseException):
            print(f"[server] connection task join error: {result}", file=sys.stderr)
    await server.wait_closed()
    print("[server] all connection tasks finished")


async def run_client(name: str, host: str, port: int, msg: bytes) -> str:
    """Send ``msg`` and return the first reply, as text."""
    reader, writer = await asyncio.open_connection(host, port)
    try:
        writer.write(msg)
        await writer.drain()
        reply = (await reader.read(BUFFER_SIZE)).decode("utf-8", errors="replace")
        print(f"[{name}] received: {reply}")
        return reply
    finally:
        writer.close()
        await writer.wait_closed()


async def _main(host: str, port: int) -> None:
    server_socket = socket.create_server((host, port))
    port = server_socket.getsockname()[1]
    print(f"[main] listening on {host}:{port}")

    shutdown = Shutdown()
    server_task = asyncio.create_task(run_server(server_socket, shutdown))
    await asyncio.sleep(STARTUP_DELAY)

    await run_client("client-1", host, port, b"hello from client 1")
    await run_client("client-2", host, port, b"hello from client 2")

    print("[main] sending shutdown signal")
    shutdown.trigger()
    try:
        await server_task
    except OSError as error:
        print(f"[main] server returned error: {error}", file=sys.stderr)
    else:
        print("[main] server exited cleanly")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run an echo server with graceful shutdown.")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    args = parser.parse_args(argv)
    asyncio.run(_main(args.host, args.port))
    return 0