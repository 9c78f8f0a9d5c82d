"""Minimal asyncio broadcast primitives.

A Broadcaster fans values out to any number of Subscriptions, each backed by
its own asyncio.Queue. A private sentinel on the queue ends iteration, as with
the session event queues of the web layer.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Generic, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")

_CLOSED = object()


class Subscription(Generic[T]):
    """One observer's view of a Broadcaster.

    Async-iterable; iteration ends after close(). Closing one subscription
    never affects the others.
    """

    def __init__(self, on_close: Callable[[Subscription[T]], None] | None = None):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._on_close = on_close
        self.closed = False

    def push(self, value: T) -> None:
        if not self.closed:
            self._queue.put_nowait(value)

    async def get(self) -> T:
        """Wait for the next value.

        Raises:
            StopAsyncIteration: If the subscription is closed
        """
        if self.closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    def get_nowait(self) -> T:
        """Return the next queued value, raising asyncio.QueueEmpty if none."""
        item = self._queue.get_nowait()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._queue.put_nowait(_CLOSED)
        if self._on_close is not None:
            self._on_close(self)

    def __aiter__(self) -> Subscription[T]:
        return self

    async def __anext__(self) -> T:
        return await self.get()

    async def __aenter__(self) -> Subscription[T]:
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()


class Broadcaster(Generic[T]):
    """Publish values to every live subscription."""

    def __init__(self, name: str = "broadcaster"):
        self.name = name
        self._subscriptions: list[Subscription[T]] = []

    def subscribe(self, initial: T | None = None, emit_initial: bool = True) -> Subscription[T]:
        """Create a subscription, optionally seeded with a first value."""
        subscription: Subscription[T] = Subscription(on_close=self._remove)
        self._subscriptions.append(subscription)
        if emit_initial:
            subscription.push(initial)
        logger.debug("stream.subscribed", stream=self.name, observers=len(self._subscriptions))
        return subscription

    def publish(self, value: T) -> None:
        for subscription in list(self._subscriptions):
            subscription.push(value)

    def close_all(self) -> None:
        for subscription in list(self._subscriptions):
            subscription.close()

    @property
    def observer_count(self) -> int:
        return len(self._subscriptions)

    def _remove(self, subscription: Subscription[T]) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
        logger.debug("stream.unsubscribed", stream=self.name, observers=len(self._subscriptions))
