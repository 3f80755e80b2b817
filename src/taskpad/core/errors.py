# src/taskpad/core/errors.py

from __future__ import annotations

"""
Error taxonomy.

Every error carries a human-readable message that front-ends print as-is.
None of them is fatal: the failed operation is abandoned and the app keeps running.
"""


class TaskpadError(Exception):
    default_message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# ---- input / auth ----


class EmptyInput(TaskpadError):
    default_message = "Please fill in all fields"


class InvalidCredentials(TaskpadError):
    default_message = "Invalid username or password"


class UsernameTaken(TaskpadError):
    default_message = "Username already exists"


class PasswordMismatch(TaskpadError):
    default_message = "Passwords do not match"


# ---- store ----


class StoreError(TaskpadError):
    """Failure reported by the remote store. `message` is the underlying reason."""

    def __str__(self) -> str:
        return f"Error: {self.message}"


class StoreReadFailed(StoreError):
    pass


class StoreWriteFailed(StoreError):
    pass


class SubscriptionFailed(StoreError):
    pass


# ---- tasks / session ----


class MissingTaskId(TaskpadError):
    default_message = "Task has no id (it was never saved)"


class TaskNotFound(TaskpadError):
    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"No task with id {task_id}")


class NotSignedIn(TaskpadError):
    default_message = "Not signed in"


class InvalidTransition(TaskpadError):
    default_message = "That action is not available on this screen"
