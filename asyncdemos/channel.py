"""An async channel with an optional bound, shared by many senders and receivers."""

from __future__ import annotations

import asyncio
from collections import deque
from contextlib import suppress
from typing import AsyncIterator, Generic, TypeVar

T = TypeVar("T")


class ChannelClosed(Exception):
    """Raised on sending to a closed channel, or receiving from a closed, empty one."""


class Channel(Generic[T]):
    """A FIFO channel; ``send`` waits for room when the channel is bounded and full.

    Closing the channel makes every later ``send`` fail, while receivers still get
    the items already queued before ``recv`` starts failing.
    """

    def __init__(self, capacity: int | None = None) -> None:
        if capacity is not None and capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._items: deque[T] = deque()
        self._getters: deque[asyncio.Future] = deque()
        self._putters: deque[asyncio.Future] = deque()
        self._closed = False

    def __len__(self) -> int:
        return len(self._items)

    def capacity(self) -> int | None:
        """Return the bound, or None for an unbounded channel."""
        return self._capacity

    @property
    def closed(self) -> bool:
        return self._closed

    def _full(self) -> bool:
        return self._capacity is not None and len(self._items) >= self._capacity

    @staticmethod
    def _wake_next(waiters: deque[asyncio.Future]) -> None:
        while waiters:
            waiter = waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return

    async def _wait(self, waiters: deque[asyncio.Future]) -> None:
        waiter = asyncio.get_running_loop().create_future()
        waiters.append(waiter)
        try:
            await waiter
        except BaseException:
            waiter.cancel()
            with suppress(ValueError):
                waiters.remove(waiter)
            if not waiter.cancelled():
                # The turn was handed to us before we were cancelled; pass it on.
                self._wake_next(waiters)
            raise

    async def send(self, item: T) -> None:
        """Queue ``item``, waiting for room; raise ChannelClosed if the channel is closed."""
        while not self._closed and self._full():
            await self._wait(self._putters)
        if self._closed:
            raise ChannelClosed("channel is closed")
        self._items.append(item)
        self._wake_next(self._getters)

    async def recv(self) -> T:
        """Take the oldest item, waiting for one; raise ChannelClosed once closed and empty."""
        while not self._items:
            if self._closed:
                raise ChannelClosed("channel is closed")
            await self._wait(self._getters)
        item = self._items.popleft()
        self._wake_next(self._putters)
        return item

    def close(self) -> None:
        """Close the channel and wake everyone waiting on it."""
        self._closed = True
        for waiter in (*self._getters, *self._putters):
            if not waiter.done():
                waiter.set_result(None)
        self._getters.clear()
        self._putters.clear()

    def __aiter__(self) -> AsyncIterator[T]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[T]:
        while True:
            try:
                yield await self.recv()
            except ChannelClosed:
                return