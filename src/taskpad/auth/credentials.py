# src/taskpad/auth/credentials.py

from __future__ import annotations

"""
Credential service.

Accounts live at Users/{username} as {"username", "password"}.
Passwords are stored and compared in plain text, matching the existing database.

Registration is check-then-write: two clients registering the same name at the
same moment can both pass the existence check. Known race, not handled.
"""

import logging
from dataclasses import dataclass
from typing import Any

from ..core.errors import (
    EmptyInput,
    InvalidCredentials,
    PasswordMismatch,
    UsernameTaken,
)
from ..core.ports import DocumentStore
from ..store.paths import user_path

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class User:
    username: str = ""
    password: str = ""

    def to_record(self) -> dict[str, Any]:
        return {"username": self.username, "password": self.password}


def _blank(value: str | None) -> bool:
    return not value or not value.strip()


class CredentialService:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def login(self, username: str, password: str) -> User:
        if _blank(username) or _blank(password):
            raise EmptyInput("Please enter both username and password")

        record = await self._store.get(user_path(username))
        stored = record.get("password") if isinstance(record, dict) else None
        if stored is None or stored != password:
            logger.info("Login rejected user=%s (exists=%s)", username, record is not None)
            raise InvalidCredentials()

        logger.info("Login ok user=%s", username)
        return User(username=username, password=password)

    async def register(self, username: str, password: str, confirm_password: str) -> User:
        if _blank(username) or _blank(password) or _blank(confirm_password):
            raise EmptyInput("Please fill in all fields")
        if password != confirm_password:
            raise PasswordMismatch()

        path = user_path(username)
        if await self._store.get(path) is not None:
            logger.info("Registration rejected, username taken: %s", username)
            raise UsernameTaken()

        user = User(username=username, password=password)
        await self._store.set(path, user.to_record())
        logger.info("Registered user=%s", username)
        return user
