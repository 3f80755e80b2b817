# src/taskpad/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time: without a Firebase URL the app runs on the
  in-memory store.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "TASKPAD"

STORE_FIREBASE = "firebase"
STORE_MEMORY = "memory"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Optional[Path]) -> Optional[Path]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Store ----
    store_backend: str
    firebase_url: Optional[str]
    firebase_credentials: Optional[Path]
    http_timeout: float

    @property
    def log_file(self) -> Path:
        return self.data_dir / f"{self.app_name}.log"

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskpad").strip() or "taskpad"
        log_level = _env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO"
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskpad"))

        firebase_url = _env(_k("FIREBASE_URL")).strip() or None
        firebase_credentials = _env_path(_k("FIREBASE_CREDENTIALS"), None)

        # Firebase when a URL is configured, otherwise the offline in-memory store.
        default_backend = STORE_FIREBASE if firebase_url else STORE_MEMORY
        store_backend = _env(_k("STORE_BACKEND"), default_backend).strip().lower()
        if store_backend not in (STORE_FIREBASE, STORE_MEMORY):
            store_backend = default_backend

        http_timeout = _env_float(_k("HTTP_TIMEOUT_SECONDS"), 15.0)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            store_backend=store_backend,
            firebase_url=firebase_url,
            firebase_credentials=firebase_credentials,
            http_timeout=max(1.0, http_timeout),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
