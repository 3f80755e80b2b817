# src/taskpad/store/memory_store.py

from __future__ import annotations

import copy
import logging
from typing import Any

from ..core.ports import Snapshot
from .paths import split_path
from .push_ids import PushIdGenerator
from .subscription import QueueSubscription, as_children

logger = logging.getLogger(__name__)


class MemorySubscription(QueueSubscription):
    """Subscription handed out by MemoryStore."""

    def __init__(self, store: MemoryStore, path: str) -> None:
        super().__init__("/".join(split_path(path)))
        self._store = store

    async def _on_close(self) -> None:
        self._store._detach(self)


class MemoryStore:
    """
    In-process document store with the same contract as the Firebase client.

    Used for the offline demo mode and as the store in unit tests.

    Semantics follow the Realtime Database:
    - writing None (or removing) deletes the node, empty parents disappear
    - push keys are chronological, snapshots list children in key order
    - a subscription fires when a write touches its path, an ancestor or a descendant
    """

    def __init__(self, push_ids: PushIdGenerator | None = None) -> None:
        self._root: dict[str, Any] = {}
        self._push_ids = push_ids or PushIdGenerator()
        self._subs: list[MemorySubscription] = []

    # ---- tree helpers ----

    def _node(self, parts: list[str]) -> Any | None:
        node: Any = self._root
        for p in parts:
            if not isinstance(node, dict) or p not in node:
                return None
            node = node[p]
        return node

    def _write(self, parts: list[str], value: Any) -> None:
        if not parts:
            self._root = copy.deepcopy(value) if isinstance(value, dict) else {}
            return

        if value is None:
            self._delete(parts)
            return

        node = self._root
        for p in parts[:-1]:
            child = node.get(p)
            if not isinstance(child, dict):
                child = {}
                node[p] = child
            node = child
        node[parts[-1]] = copy.deepcopy(value)

    def _delete(self, parts: list[str]) -> None:
        trail: list[tuple[dict[str, Any], str]] = []
        node: Any = self._root
        for p in parts:
            if not isinstance(node, dict) or p not in node:
                return
            trail.append((node, p))
            node = node[p]

        parent, key = trail.pop()
        del parent[key]
        # prune parents left empty
        while trail and not parent:
            parent, key = trail.pop()
            del parent[key]

    def _snapshot(self, parts: list[str]) -> Snapshot:
        return as_children(copy.deepcopy(self._node(parts)))

    def _notify(self, parts: list[str]) -> None:
        written = "/".join(parts)
        for sub in list(self._subs):
            path = sub.path
            related = (
                written == path
                or not path
                or not written
                or written.startswith(path + "/")
                or path.startswith(written + "/")
            )
            if related:
                sub._deliver(self._snapshot(split_path(path)))

    def _detach(self, sub: MemorySubscription) -> None:
        if sub in self._subs:
            self._subs.remove(sub)

    # ---- DocumentStore API ----

    async def get(self, path: str) -> Any | None:
        return copy.deepcopy(self._node(split_path(path)))

    async def set(self, path: str, value: Any) -> None:
        parts = split_path(path)
        self._write(parts, value)
        logger.debug("set %s", path)
        self._notify(parts)

    async def push(self, path: str, value: Any) -> str:
        key = self._push_ids.next_id()
        parts = split_path(path) + [key]
        self._write(parts, value)
        logger.debug("push %s -> %s", path, key)
        self._notify(parts)
        return key

    async def remove(self, path: str) -> None:
        parts = split_path(path)
        if parts:
            self._delete(parts)
        else:
            self._root = {}
        logger.debug("remove %s", path)
        self._notify(parts)

    def subscribe(self, path: str) -> MemorySubscription:
        sub = MemorySubscription(self, path)
        self._subs.append(sub)
        sub._deliver(self._snapshot(split_path(path)))
        logger.debug("subscribe %s (active=%d)", path, len(self._subs))
        return sub

    @property
    def subscriber_count(self) -> int:
        return len(self._subs)

    async def close(self) -> None:
        for sub in list(self._subs):
            await sub.close()
