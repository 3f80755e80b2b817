# src/taskpad/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
The credential service and the task synchronizer receive a DocumentStore handle,
so the Firebase client can be swapped for the in-memory store in demos and tests.
"""

from collections.abc import AsyncIterator
from typing import Any, Protocol

# Collection snapshot: child key -> child record. Empty when the path holds nothing.
Snapshot = dict[str, Any]


class Subscription(Protocol):
    """
    Continuous read of one path.

    - the first item is the value at subscription time, then one item per change
    - errors are raised from __anext__ as SubscriptionFailed
    - close() detaches; iteration then stops
    """

    def __aiter__(self) -> AsyncIterator[Snapshot]: ...
    async def __anext__(self) -> Snapshot: ...
    async def close(self) -> None: ...


class DocumentStore(Protocol):
    """Hierarchical document store addressed by slash-delimited paths."""

    async def get(self, path: str) -> Any | None: ...
    async def set(self, path: str, value: Any) -> None: ...
    async def push(self, path: str, value: Any) -> str: ...
    async def remove(self, path: str) -> None: ...
    def subscribe(self, path: str) -> Subscription: ...
    async def close(self) -> None: ...
