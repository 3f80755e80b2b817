# src/taskpad/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- picks the store implementation and wires it into AppState.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import STORE_FIREBASE, get_settings
from ..core.ports import DocumentStore
from ..core.state import AppState
from ..store.firebase_store import FirebaseStore
from ..store.memory_store import MemoryStore

logger = logging.getLogger(__name__)


def create_store(settings) -> DocumentStore:
    """
    Firebase when configured, otherwise the in-memory store.

    Falling back keeps the app usable as a local demo; data is lost on exit.
    """
    if settings.store_backend == STORE_FIREBASE:
        key_file = settings.firebase_credentials
        if key_file is None or not Path(key_file).is_file():
            logger.warning("Firebase key file missing (%s); using in-memory store.", key_file)
        else:
            try:
                return FirebaseStore(
                    settings.firebase_url or "",
                    credentials_path=str(key_file),
                    timeout=settings.http_timeout,
                )
            except (ValueError, OSError) as exc:
                logger.warning("Firebase store not available (%s); using in-memory store.", exc)

    logger.info("Using in-memory store (offline demo: data is not persisted).")
    return MemoryStore()


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    return AppState.for_store(create_store(settings), settings=settings)
