# src/taskpad/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console REPL on one asyncio loop.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.actions import stop_task_sync
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await stop_task_sync(state)
    except Exception:
        logger.exception("Failed to stop task sync.")

    try:
        await state.store.close()
    except Exception:
        logger.debug("Store close failed.", exc_info=True)


async def run(state: AppState) -> None:
    try:
        await run_console_loop(state)
    finally:
        await _shutdown(state)


def main() -> None:
    settings = get_settings()

    console_level = getattr(logging, settings.log_level, logging.INFO)
    setup_logging(log_dir=settings.data_dir, log_name=settings.log_file.name, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)
    try:
        asyncio.run(run(state))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
