# src/taskpad/store/subscription.py

from __future__ import annotations

import asyncio
from typing import Any

from ..core.ports import Snapshot

_CLOSED = object()


def as_children(value: Any) -> Snapshot:
    """
    Normalize a node into a collection snapshot (key -> child), keys in order.

    The Realtime Database returns objects with sequential integer keys as JSON arrays;
    those come back as dicts keyed by index with the holes dropped.
    """
    if isinstance(value, dict):
        return {k: value[k] for k in sorted(value)}
    if isinstance(value, list):
        return {str(i): v for i, v in enumerate(value) if v is not None}
    return {}


class QueueSubscription:
    """
    Async iterator fed through an asyncio.Queue.

    Producers call _deliver() with a snapshot or an exception instance.
    close() drops anything undelivered and wakes a pending consumer with StopAsyncIteration.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _deliver(self, item: Any) -> None:
        if not self._closed:
            self._queue.put_nowait(item)

    def _on_first_read(self) -> None:
        """Hook for lazily started producers."""

    async def _on_close(self) -> None:
        """Hook for producer teardown."""

    def __aiter__(self) -> QueueSubscription:
        return self

    async def __anext__(self) -> Snapshot:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        if not self._closed:
            self._on_first_read()
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(_CLOSED)
        await self._on_close()
