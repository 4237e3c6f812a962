"""A producer task feeding a bounded channel that the caller drains."""

from __future__ import annotations

import argparse
import asyncio

BUFFER_SIZE = 32

_DONE = object()


async def run(count: int = 10) -> list[str]:
    """Send ``count`` messages through a bounded queue and return them as received."""
    channel: asyncio.Queue = asyncio.Queue(BUFFER_SIZE)

    async def produce() -> None:
        try:
            for i in range(count):
                await channel.put(f"Message {i}")
        finally:
            await channel.put(_DONE)

    sender = asyncio.create_task(produce())
    received: list[str] = []
    while (message := await channel.get()) is not _DONE:
        print(f"Received: {message}")
        received.append(message)
    await sender
    return received


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Pass messages through a bounded channel.")
    parser.add_argument("--count", type=int, default=10, help="number of messages to send")
    args = parser.parse_args(argv)
    asyncio.run(run(args.count))
    return 0