# src/taskpad/tasks/task_sync.py

from __future__ import annotations

"""
Task synchronizer.

Keeps a local mirror of Tasks/{username} in step with the store:
- subscribe() opens a store subscription and yields the decoded task list on every change
- create/update/toggle/delete write through to the store; nothing is inserted locally,
  the mirror only changes when the store echoes the write back through the subscription

The mirror belongs to this object. Callers read `tasks` (a tuple) and issue writes
through the methods below.
"""

import logging
from collections.abc import AsyncIterator
from dataclasses import replace

from ..core.errors import MissingTaskId, NotSignedIn, SubscriptionFailed, TaskNotFound
from ..core.ports import DocumentStore, Snapshot, Subscription
from ..store.paths import task_path, tasks_path
from .task_models import Task

logger = logging.getLogger(__name__)


def decode_snapshot(snapshot: Snapshot) -> list[Task]:
    tasks: list[Task] = []
    for key, raw in snapshot.items():
        task = Task.from_record(key, raw)
        if task is None:
            logger.debug("Skipping malformed task record key=%s", key)
            continue
        tasks.append(task)
    return tasks


class TaskSynchronizer:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._username: str | None = None
        self._subscription: Subscription | None = None
        self._mirror: tuple[Task, ...] = ()
        self.last_error: SubscriptionFailed | None = None

    @property
    def username(self) -> str | None:
        return self._username

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._mirror

    def get(self, task_id: str) -> Task | None:
        for t in self._mirror:
            if t.id == task_id:
                return t
        return None

    # ---- subscription ----

    async def subscribe(self, username: str) -> AsyncIterator[list[Task]]:
        """
        Start mirroring `username`'s tasks and return the snapshot sequence.

        Any previous subscription is closed first, so a stale feed can never write
        into the new user's mirror.
        """
        await self.unsubscribe()
        subscription = self._store.subscribe(tasks_path(username))
        self._username = username
        self._subscription = subscription
        self.last_error = None
        logger.info("Subscribed to tasks of %s", username)
        return self._iterate(subscription)

    async def _iterate(self, subscription: Subscription) -> AsyncIterator[list[Task]]:
        try:
            async for snapshot in subscription:
                if subscription is not self._subscription:
                    break
                tasks = decode_snapshot(snapshot)
                self._mirror = tuple(tasks)
                logger.debug("Task snapshot user=%s count=%d", self._username, len(tasks))
                yield tasks
        except SubscriptionFailed as exc:
            if subscription is self._subscription:
                self.last_error = exc
            logger.warning("Task subscription failed user=%s: %s", self._username, exc.message)
            raise

    async def unsubscribe(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            await subscription.close()
            logger.info("Unsubscribed from tasks of %s", self._username)
        self._username = None
        self._mirror = ()

    # ---- writes ----

    def _require_user(self) -> str:
        if not self._username:
            raise NotSignedIn()
        return self._username

    @staticmethod
    def _require_id(task_id: str | None) -> str:
        if not task_id or not task_id.strip():
            raise MissingTaskId()
        return task_id

    async def create(self, title: str, description: str = "", completed: bool = False) -> str:
        username = self._require_user()
        task = Task(username=username, title=title, description=description, completed=completed)
        key = await self._store.push(tasks_path(username), task.to_record())
        logger.info("Task created id=%s user=%s", key, username)
        return key

    async def update(self, task_id: str, title: str, description: str, completed: bool) -> None:
        username = self._require_user()
        task_id = self._require_id(task_id)
        task = Task(
            id=task_id,
            username=username,
            title=title,
            description=description,
            completed=completed,
        )
        await self._store.set(task_path(username, task_id), task.to_record())
        logger.info("Task updated id=%s", task_id)

    async def toggle_complete(self, task_id: str) -> None:
        username = self._require_user()
        task_id = self._require_id(task_id)
        current = self.get(task_id)
        if current is None:
            raise TaskNotFound(task_id)
        # last-writer-wins on the mirror's (possibly stale) copy
        flipped = replace(current, completed=not current.completed)
        await self._store.set(task_path(username, task_id), flipped.to_record())
        logger.info("Task toggled id=%s completed=%s", task_id, flipped.completed)

    async def delete(self, task_id: str) -> None:
        username = self._require_user()
        task_id = self._require_id(task_id)
        await self._store.remove(task_path(username, task_id))
        logger.info("Task deleted id=%s", task_id)
