# tests/test_console_connector.py

from __future__ import annotations

import asyncio

import pytest

from taskpad.connectors import console_connector
from taskpad.core.errors import SubscriptionFailed
from taskpad.core.state import AppState


def _feed(monkeypatch: pytest.MonkeyPatch, lines: list[str | None]) -> None:
    def fake_reader(loop: asyncio.AbstractEventLoop, queue: asyncio.Queue) -> None:
        for line in lines:
            queue.put_nowait(line)

    monkeypatch.setattr(console_connector, "_start_stdin_reader", fake_reader)


@pytest.mark.asyncio
async def test_console_loop_handles_input_until_exit(
    state: AppState, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _feed(monkeypatch, ["", "hello", "/help", "/login alice", "/nope", "/exit", "/whoami"])

    await console_connector.run_console_loop(state)
    out = capsys.readouterr().out

    assert "Commands start with '/'" in out
    assert "Available commands (login):" in out
    assert "Please enter both username and password" in out
    assert "Unknown command: /nope" in out
    # nothing after /exit is handled
    assert "Signed in as" not in out
    assert state.listeners == []


@pytest.mark.asyncio
async def test_console_loop_stops_on_eof(
    state: AppState, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _feed(monkeypatch, ["/whoami", None, "/help"])

    await console_connector.run_console_loop(state)
    out = capsys.readouterr().out

    assert "Signed in as: nobody (screen: login)" in out
    assert "Available commands" not in out
    assert out.rstrip().endswith("login>")


@pytest.mark.asyncio
async def test_console_loop_reports_crashing_handler(
    state: AppState, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    async def broken(state, line):
        raise RuntimeError("boom")

    monkeypatch.setattr(console_connector.command_registry, "handle", broken)
    _feed(monkeypatch, ["/help", "/quit"])

    await console_connector.run_console_loop(state)

    assert "Internal error while handling a command." in capsys.readouterr().out


def test_task_listener_prints_list_and_failure(state: AppState, capsys: pytest.CaptureFixture[str]) -> None:
    listener = console_connector._make_task_listener(state)

    listener([])
    listener(SubscriptionFailed("network down"))
    out = capsys.readouterr().out

    assert "[SYNC] Tasks [all] 0 of 0:" in out
    assert "[SYNC] Error: network down - the list is no longer updating." in out
