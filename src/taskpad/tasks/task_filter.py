# src/taskpad/tasks/task_filter.py

from __future__ import annotations

from collections.abc import Iterable

from .task_models import Task, TaskFilter


def filter_tasks(tasks: Iterable[Task], mode: TaskFilter) -> list[Task]:
    """Subset of `tasks` for the given mode, keeping the snapshot order."""
    if mode == TaskFilter.COMPLETED:
        return [t for t in tasks if t.completed]
    if mode == TaskFilter.ONGOING:
        return [t for t in tasks if not t.completed]
    return list(tasks)
