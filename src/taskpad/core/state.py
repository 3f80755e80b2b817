# src/taskpad/core/state.py

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from ..auth.credentials import CredentialService
from ..tasks.task_models import Task, TaskFilter
from ..tasks.task_sync import TaskSynchronizer
from .errors import SubscriptionFailed
from .ports import DocumentStore
from .session import Session

# Called with the new task list, or with the error that ended the subscription.
TaskListener = Callable[[list[Task] | SubscriptionFailed], None]


@dataclass
class AppState:
    # Settings are kept on the state so handlers do not re-read config.
    settings: Any

    store: DocumentStore
    credentials: CredentialService
    tasks: TaskSynchronizer

    session: Session = field(default_factory=Session)
    task_filter: TaskFilter = TaskFilter.ALL

    listeners: list[TaskListener] = field(default_factory=list)
    sync_task: asyncio.Task[None] | None = None

    @classmethod
    def for_store(cls, store: DocumentStore, settings: Any = None) -> AppState:
        return cls(
            settings=settings,
            store=store,
            credentials=CredentialService(store),
            tasks=TaskSynchronizer(store),
        )
