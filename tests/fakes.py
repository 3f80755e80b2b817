# tests/fakes.py

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any, TypeVar

from taskpad.core.errors import StoreReadFailed, StoreWriteFailed, SubscriptionFailed
from taskpad.store.memory_store import MemoryStore

T = TypeVar("T")


class RecordingStore(MemoryStore):
    """
    MemoryStore that records writes and can be told to fail.

    - fail_reads / fail_writes: when set, the next operations raise with that message
    - break_subscriptions(): push a SubscriptionFailed into every open subscription
    """

    def __init__(self) -> None:
        super().__init__()
        self.writes: list[tuple[str, str, Any]] = []
        self.reads: list[str] = []
        self.fail_reads: str | None = None
        self.fail_writes: str | None = None

    async def get(self, path: str) -> Any | None:
        self.reads.append(path)
        if self.fail_reads:
            raise StoreReadFailed(self.fail_reads)
        return await super().get(path)

    async def set(self, path: str, value: Any) -> None:
        if self.fail_writes:
            raise StoreWriteFailed(self.fail_writes)
        self.writes.append(("set", path, value))
        await super().set(path, value)

    async def push(self, path: str, value: Any) -> str:
        if self.fail_writes:
            raise StoreWriteFailed(self.fail_writes)
        key = await super().push(path, value)
        self.writes.append(("push", f"{path}/{key}", value))
        return key

    async def remove(self, path: str) -> None:
        if self.fail_writes:
            raise StoreWriteFailed(self.fail_writes)
        self.writes.append(("remove", path, None))
        await super().remove(path)

    def break_subscriptions(self, message: str) -> None:
        for sub in list(self._subs):
            sub._deliver(SubscriptionFailed(message))


async def next_item(feed: AsyncIterator[T], timeout: float = 1.0) -> T:
    async def _one() -> T:
        return await anext(feed)

    return await asyncio.wait_for(_one(), timeout)


class ListenerQueue:
    """Collects AppState listener payloads so tests can await the next one."""

    def __init__(self) -> None:
        self.queue: asyncio.Queue[Any] = asyncio.Queue()

    def __call__(self, payload: Any) -> None:
        self.queue.put_nowait(payload)

    async def next(self, timeout: float = 1.0) -> Any:
        return await asyncio.wait_for(self.queue.get(), timeout)
