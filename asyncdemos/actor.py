"""A counter owned by one task and driven through a bounded mailbox."""

from __future__ import annotations

import asyncio
import weakref
from dataclasses import dataclass

MAILBOX_SIZE = 32

_running: set[asyncio.Task] = set()


@dataclass(frozen=True)
class Increment:
    """Add one to the counter."""


@dataclass(frozen=True)
class Get:
    """Ask for the counter's value; the answer is set on ``reply``."""

    reply: asyncio.Future


async def _serve(queue: asyncio.Queue) -> None:
    counter = 0
    while True:
        match await queue.get():
            case Increment():
                counter += 1
            case Get(reply=reply):
                if not reply.done():
                    reply.set_result(counter)


def _stop(task: asyncio.Task) -> None:
    if not task.done() and not task.get_loop().is_closed():
        task.cancel()


class _Mailbox:
    """The sending side of an actor; dropping it stops the actor."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue(MAILBOX_SIZE)
        self._task = asyncio.get_running_loop().create_task(_serve(self._queue))
        self._closed = False
        _running.add(self._task)
        self._task.add_done_callback(_running.discard)
        weakref.finalize(self, _stop, self._task)

    @property
    def stopped(self) -> bool:
        return self._closed or self._task.done()

    async def send(self, command: Increment | Get) -> None:
        """Queue a command, waiting for room; raise if the actor has stopped."""
        if self.stopped:
            raise ConnectionError("actor has stopped")
        await self._queue.put(command)

    def close(self) -> None:
        """Stop the actor."""
        self._closed = True
        self._task.cancel()


async def start() -> _Mailbox:
    """Start a counter actor and return the mailbox used to talk to it."""
    return _Mailbox()


async def get_counter(sender: _Mailbox) -> int:
    """Return the actor's counter, or 0 if the actor cannot answer."""
    reply = asyncio.get_running_loop().create_future()
    try:
        await sender.send(Get(reply))
    except ConnectionError:
        return 0
    await asyncio.wait({reply, sender._task}, return_when=asyncio.FIRST_COMPLETED)
    if reply.done() and not reply.cancelled():
        return reply.result()
    reply.cancel()
    return 0


async def increment_counter(sender: _Mailbox) -> None:
    """Ask the actor to add one to its counter without waiting for it."""
    try:
        await sender.send(Increment())
    except ConnectionError:
        pass