# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskpad.core.state import AppState

from .fakes import RecordingStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI helpers.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the developer's environment / .env.
    """
    return SimpleNamespace(
        app_name="taskpad-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        store_backend="memory",
        firebase_url=None,
        firebase_credentials=None,
        http_timeout=1.0,
    )


@pytest.fixture()
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture()
def state(store: RecordingStore, settings: SimpleNamespace) -> AppState:
    """AppState wired to the recording in-memory store."""
    return AppState.for_store(store, settings=settings)
