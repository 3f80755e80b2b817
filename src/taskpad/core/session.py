# src/taskpad/core/session.py

from __future__ import annotations

import logging
from enum import StrEnum

from ..auth.credentials import User
from .errors import InvalidTransition

logger = logging.getLogger(__name__)


class Screen(StrEnum):
    LOGIN = "login"
    REGISTER = "register"
    TASK_MANAGER = "task_manager"


class Session:
    """
    Who is signed in and which screen is active.

        LOGIN        --login_succeeded-->    TASK_MANAGER
        LOGIN        --open_register-->      REGISTER
        REGISTER     --register_succeeded--> TASK_MANAGER
        REGISTER     --back_to_login-->      LOGIN
        TASK_MANAGER --logout-->             LOGIN (user cleared)

    Lives only as long as the process; nothing is persisted.
    """

    def __init__(self) -> None:
        self.screen = Screen.LOGIN
        self.user: User | None = None

    @property
    def username(self) -> str | None:
        return self.user.username if self.user else None

    def _move(self, expected: Screen, target: Screen, event: str) -> None:
        if self.screen != expected:
            raise InvalidTransition(f"Cannot {event} from the {self.screen.value} screen")
        logger.debug("Screen %s -> %s (%s)", self.screen.value, target.value, event)
        self.screen = target

    def login_succeeded(self, user: User) -> None:
        self._move(Screen.LOGIN, Screen.TASK_MANAGER, "log in")
        self.user = user

    def open_register(self) -> None:
        self._move(Screen.LOGIN, Screen.REGISTER, "open registration")

    def register_succeeded(self, user: User) -> None:
        self._move(Screen.REGISTER, Screen.TASK_MANAGER, "register")
        self.user = user

    def back_to_login(self) -> None:
        self._move(Screen.REGISTER, Screen.LOGIN, "go back to login")

    def logout(self) -> None:
        self._move(Screen.TASK_MANAGER, Screen.LOGIN, "log out")
        self.user = None

    def require(self, screen: Screen) -> None:
        if self.screen != screen:
            raise InvalidTransition()
