# src/taskpad/store/paths.py

from __future__ import annotations

USERS_ROOT = "Users"
TASKS_ROOT = "Tasks"


def split_path(path: str) -> list[str]:
    return [p for p in (path or "").split("/") if p]


def user_path(username: str) -> str:
    return f"{USERS_ROOT}/{username}"


def tasks_path(username: str) -> str:
    return f"{TASKS_ROOT}/{username}"


def task_path(username: str, task_id: str) -> str:
    return f"{TASKS_ROOT}/{username}/{task_id}"
