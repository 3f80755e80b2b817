# src/taskpad/store/firebase_store.py

from __future__ import annotations

"""
Firebase Realtime Database store on top of the Admin SDK (firebase_admin.db).

- get/set/push/remove call Reference.get/set/push/delete on a worker thread
- subscribe() uses Reference.listen(): the SDK reads the event stream on its own
  thread and reconnects dropped connections; "put" / "patch" events carry
  (path, data) relative to the subscribed path
- the subscription keeps a local copy of the subtree and yields a full snapshot
  after each event, on the event loop

A listen() call that cannot connect ends the subscription with SubscriptionFailed.
"""

import asyncio
import copy
import itertools
import logging
import threading
from collections.abc import Callable
from typing import Any

import firebase_admin
from firebase_admin import credentials, db
from firebase_admin import exceptions as fb_exceptions
from google.auth import exceptions as auth_exceptions

from ..core.errors import StoreError, StoreReadFailed, StoreWriteFailed, SubscriptionFailed
from .paths import split_path
from .subscription import QueueSubscription, as_children

logger = logging.getLogger(__name__)

# Network, permission and malformed-path errors raised by the SDK.
SDK_ERRORS = (fb_exceptions.FirebaseError, auth_exceptions.GoogleAuthError, ValueError, TypeError)

_app_ids = itertools.count(1)

ReferenceFactory = Callable[[str], Any]


def _exc_text(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


def apply_event(tree: Any, path: str, data: Any, *, merge: bool = False) -> Any:
    """
    Apply one streaming event to the local copy of the subscribed subtree.

    put   -> replace the node at `path` with `data` (None deletes)
    patch -> for each key in `data`, replace the node at `path/key`
    """
    base = split_path(path)
    if merge:
        if not isinstance(data, dict):
            return tree
        for key, value in data.items():
            tree = _put(tree, base + split_path(key), value)
        return tree
    return _put(tree, base, data)


def _put(node: Any, parts: list[str], value: Any) -> Any:
    if not parts:
        return value
    if isinstance(node, list):
        node = as_children(node)
    elif not isinstance(node, dict):
        node = {}
    head, rest = parts[0], parts[1:]
    child = _put(node.get(head), rest, value)
    if child is None or child == {}:
        node.pop(head, None)
    else:
        node[head] = child
    return node or None


class FirebaseSubscription(QueueSubscription):
    """
    Bridges Reference.listen() into the event loop.

    The listener is registered lazily on first read. SDK callbacks arrive on the
    listener thread and are handed to the loop with call_soon_threadsafe.
    """

    def __init__(self, store: FirebaseStore, path: str) -> None:
        super().__init__(path)
        self._store = store
        self._tree: Any = None
        self._lock = threading.Lock()
        self._registration: Any = None
        self._starting: asyncio.Task[None] | None = None

    def _on_first_read(self) -> None:
        if self._starting is None:
            self._starting = asyncio.create_task(self._start())

    async def _start(self) -> None:
        loop = asyncio.get_running_loop()

        def on_event(event: Any) -> None:
            kind = event.event_type
            if kind not in ("put", "patch"):
                return
            try:
                loop.call_soon_threadsafe(self._apply, kind, event.path, event.data)
            except RuntimeError:
                pass  # loop already closed

        try:
            await asyncio.to_thread(self._listen, on_event)
        except SDK_ERRORS as exc:
            logger.warning("Subscription %s failed: %s", self.path, _exc_text(exc))
            self._deliver(SubscriptionFailed(_exc_text(exc)))
        except Exception as exc:
            logger.exception("Subscription %s crashed", self.path)
            self._deliver(SubscriptionFailed(_exc_text(exc)))

    def _listen(self, on_event: Callable[[Any], None]) -> None:
        registration = self._store._ref(self.path).listen(on_event)
        with self._lock:
            stale = self._closed
            if not stale:
                self._registration = registration
        if stale:
            # closed while connecting
            registration.close()
            return
        logger.debug("Listening on %s", self.path)

    def _apply(self, kind: str, path: str, data: Any) -> None:
        if self._closed:
            return
        self._tree = apply_event(self._tree, path, data, merge=kind == "patch")
        self._deliver(as_children(copy.deepcopy(self._tree)))

    async def _on_close(self) -> None:
        with self._lock:
            registration, self._registration = self._registration, None
        starting, self._starting = self._starting, None
        if starting is not None and not starting.done():
            # the worker thread keeps running and closes what it opened
            starting.cancel()
        if registration is not None:
            await asyncio.to_thread(registration.close)
        self._store._detach(self)


class FirebaseStore:
    """
    DocumentStore backed by a Firebase Realtime Database.

    Authenticates with a service-account key file through the Admin SDK.
    Each store owns a named firebase_admin App, deleted again on close().
    Pass `reference` (path -> Reference-like object) to run without an App in tests.
    """

    def __init__(
        self,
        database_url: str,
        *,
        credentials_path: str | None = None,
        timeout: float = 15.0,
        reference: ReferenceFactory | None = None,
    ) -> None:
        database_url = (database_url or "").strip().rstrip("/")
        if not database_url:
            raise ValueError("Firebase database URL is required")
        if "://" not in database_url:
            database_url = f"https://{database_url}"
        self.database_url = database_url
        self._subs: list[FirebaseSubscription] = []
        self._app: firebase_admin.App | None = None

        if reference is None:
            if not credentials_path:
                raise ValueError("Firebase service-account key is required")
            cred = credentials.Certificate(credentials_path)
            app = firebase_admin.initialize_app(
                cred,
                {"databaseURL": database_url, "httpTimeout": timeout},
                name=f"taskpad-{next(_app_ids)}",
            )
            try:
                db.reference("/", app=app)  # validates the database URL
            except ValueError:
                firebase_admin.delete_app(app)
                raise
            self._app = app

            def reference(path: str) -> Any:
                return db.reference(path, app=app)

        self._reference = reference
        logger.info("FirebaseStore ready url=%s", self.database_url)

    def _ref(self, path: str) -> Any:
        return self._reference("/" + "/".join(split_path(path)))

    async def _call(self, action: str, path: str, error_cls: type[StoreError], fn: Callable[[], Any]) -> Any:
        try:
            return await asyncio.to_thread(fn)
        except SDK_ERRORS as exc:
            logger.warning("%s %s failed: %s", action, path, _exc_text(exc))
            raise error_cls(_exc_text(exc)) from exc

    def _detach(self, sub: FirebaseSubscription) -> None:
        if sub in self._subs:
            self._subs.remove(sub)

    # ---- DocumentStore API ----

    async def get(self, path: str) -> Any | None:
        return await self._call("get", path, StoreReadFailed, lambda: self._ref(path).get())

    async def set(self, path: str, value: Any) -> None:
        if value is None:
            await self.remove(path)
            return
        await self._call("set", path, StoreWriteFailed, lambda: self._ref(path).set(value))
        logger.debug("set %s", path)

    async def push(self, path: str, value: Any) -> str:
        child = await self._call("push", path, StoreWriteFailed, lambda: self._ref(path).push(value))
        key = getattr(child, "key", None)
        if not key:
            raise StoreWriteFailed("Database did not return a key for the new record")
        logger.debug("push %s -> %s", path, key)
        return str(key)

    async def remove(self, path: str) -> None:
        await self._call("remove", path, StoreWriteFailed, lambda: self._ref(path).delete())
        logger.debug("remove %s", path)

    def subscribe(self, path: str) -> FirebaseSubscription:
        sub = FirebaseSubscription(self, path)
        self._subs.append(sub)
        logger.debug("subscribe %s (active=%d)", path, len(self._subs))
        return sub

    @property
    def subscriber_count(self) -> int:
        return len(self._subs)

    async def close(self) -> None:
        for sub in list(self._subs):
            await sub.close()
        app, self._app = self._app, None
        if app is not None:
            firebase_admin.delete_app(app)
