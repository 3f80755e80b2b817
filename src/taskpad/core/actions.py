# src/taskpad/core/actions.py

from __future__ import annotations

"""
UI intents.

Front-ends call these instead of touching the services directly. Each one checks the
active screen, calls the credential service or the task synchronizer, and advances
the session. Errors propagate as TaskpadError subclasses with a printable message.
"""

import asyncio
import contextlib
import logging

from ..auth.credentials import User
from ..tasks.task_filter import filter_tasks
from ..tasks.task_models import Task, TaskFilter
from .errors import EmptyInput, SubscriptionFailed, TaskNotFound
from .session import Screen
from .state import AppState

logger = logging.getLogger(__name__)


# ---- account flow ----


async def login(state: AppState, username: str, password: str) -> User:
    state.session.require(Screen.LOGIN)
    user = await state.credentials.login(username, password)
    state.session.login_succeeded(user)
    await start_task_sync(state, user.username)
    return user


def open_register(state: AppState) -> None:
    state.session.open_register()


def back_to_login(state: AppState) -> None:
    state.session.back_to_login()


async def register(state: AppState, username: str, password: str, confirm_password: str) -> User:
    state.session.require(Screen.REGISTER)
    user = await state.credentials.register(username, password, confirm_password)
    state.session.register_succeeded(user)
    await start_task_sync(state, user.username)
    return user


async def logout(state: AppState) -> None:
    username = state.session.username
    state.session.logout()
    state.task_filter = TaskFilter.ALL
    await stop_task_sync(state)
    logger.info("Logged out user=%s", username)


# ---- subscription consumer ----


def _notify(state: AppState, payload: list[Task] | SubscriptionFailed) -> None:
    for listener in list(state.listeners):
        try:
            listener(payload)
        except Exception:
            logger.exception("Task listener failed")


async def _consume(state: AppState, feed) -> None:
    try:
        async for tasks in feed:
            _notify(state, tasks)
    except SubscriptionFailed as exc:
        # no resubscribe: the list stays as it was until the next login
        _notify(state, exc)


async def start_task_sync(state: AppState, username: str) -> None:
    """Replace any running consumer with one for `username`."""
    await stop_task_sync(state)
    feed = await state.tasks.subscribe(username)
    state.sync_task = asyncio.create_task(_consume(state, feed), name=f"task-sync:{username}")


async def stop_task_sync(state: AppState) -> None:
    task, state.sync_task = state.sync_task, None
    if task is not None and not task.done():
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
    await state.tasks.unsubscribe()


# ---- task intents ----


def _require_title(title: str) -> None:
    if not title or not title.strip():
        raise EmptyInput("Title is required")


async def add_task(state: AppState, title: str, description: str = "", completed: bool = False) -> str:
    state.session.require(Screen.TASK_MANAGER)
    _require_title(title)
    return await state.tasks.create(title, description, completed)


async def edit_task(
    state: AppState,
    task_id: str,
    title: str,
    description: str,
    completed: bool | None = None,
) -> None:
    """Full replacement of title/description; `completed` defaults to the current value."""
    state.session.require(Screen.TASK_MANAGER)
    _require_title(title)
    if completed is None:
        # an empty id falls through to the synchronizer's MissingTaskId
        current = state.tasks.get(task_id) if task_id else None
        if task_id and current is None:
            raise TaskNotFound(task_id)
        completed = bool(current and current.completed)
    await state.tasks.update(task_id, title, description, completed)


async def toggle_task(state: AppState, task_id: str) -> None:
    state.session.require(Screen.TASK_MANAGER)
    await state.tasks.toggle_complete(task_id)


async def delete_task(state: AppState, task_id: str) -> None:
    state.session.require(Screen.TASK_MANAGER)
    await state.tasks.delete(task_id)


def set_filter(state: AppState, mode: TaskFilter | str) -> TaskFilter:
    state.task_filter = mode if isinstance(mode, TaskFilter) else TaskFilter.parse(mode)
    return state.task_filter


def visible_tasks(state: AppState) -> list[Task]:
    return filter_tasks(state.tasks.tasks, state.task_filter)
