# src/taskpad/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime

from ..cli.commands import format_task_list
from ..cli.commands import registry as command_registry
from ..core.errors import SubscriptionFailed
from ..core.session import Screen
from ..core.state import AppState
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

_PROMPTS = {
    Screen.LOGIN: "login> ",
    Screen.REGISTER: "register> ",
    Screen.TASK_MANAGER: "tasks> ",
}


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def _start_stdin_reader(loop: asyncio.AbstractEventLoop, lines: asyncio.Queue[str | None]) -> None:
    """
    Read stdin on a daemon thread and hand lines to the loop (None on EOF).
    The thread may still be blocked in input() when the loop stops.
    """

    def _reader() -> None:
        while True:
            try:
                line: str | None = input()
            except EOFError:
                line = None
            try:
                loop.call_soon_threadsafe(lines.put_nowait, line)
            except RuntimeError:
                return  # loop already closed
            if line is None:
                return

    threading.Thread(target=_reader, name="console-stdin", daemon=True).start()


def _make_task_listener(state: AppState):
    def on_tasks(payload: list[Task] | SubscriptionFailed) -> None:
        if isinstance(payload, SubscriptionFailed):
            _print_ts(f"[SYNC] {payload} - the list is no longer updating. Log in again to retry.")
            return
        _print_ts("[SYNC] " + format_task_list(state))

    return on_tasks


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (store=%s).", type(state.store).__name__)
    app_name = str(getattr(state.settings, "app_name", "taskpad"))
    _print_ts(f"[{app_name}] /login <username> <password>, /register to sign up, /help, /exit.")

    listener = _make_task_listener(state)
    state.listeners.append(listener)

    lines: asyncio.Queue[str | None] = asyncio.Queue()
    _start_stdin_reader(asyncio.get_running_loop(), lines)

    try:
        while True:
            print(_PROMPTS.get(state.session.screen, "> "), end="", flush=True)
            line = await lines.get()
            if line is None:
                logger.info("Console EOF received, exiting.")
                print()
                break

            user_input = line.strip()
            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            if not user_input.startswith("/"):
                _print_ts("Commands start with '/'. Use /help to list them.")
                continue

            try:
                reply = await command_registry.handle(state, user_input)
            except Exception:
                logger.exception("Command handler crashed.")
                reply = "Internal error while handling a command."

            if reply is not None:
                _print_ts(reply)
    finally:
        if listener in state.listeners:
            state.listeners.remove(listener)

    logger.info("Console connector finished.")
