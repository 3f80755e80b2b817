# src/taskpad/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable

from ..core import actions
from ..core.errors import TaskNotFound, TaskpadError
from ..core.session import Screen
from ..core.state import AppState
from ..tasks.task_models import Task

CommandHandler = Callable[[AppState, str], Awaitable[str]]

logger = logging.getLogger(__name__)

ALL_SCREENS = tuple(Screen)


class CommandRegistry:
    """
    Slash-command registry used by the console (/login, /add, ...).

    Each command is bound to the screens where it makes sense; /help only lists those.
    Handlers get the raw argument text and parse it themselves.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._screens: dict[str, tuple[Screen, ...]] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        screens: Iterable[Screen] = ALL_SCREENS,
        aliases: list[str] | None = None,
    ) -> None:
        key = name.lower()
        allowed = tuple(screens)
        for alias in [key, *[a.lower() for a in aliases or []]]:
            self._handlers[alias] = handler
            self._screens[alias] = allowed
        self._help[key] = help_text

    async def handle(
        self,
        state: AppState,
        line: str,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        name, _, arg_text = line[1:].strip().partition(" ")
        name = name.lower()
        if not name:
            return "Empty command. Use /help to list available commands."

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        screen = state.session.screen
        if screen not in self._screens[name]:
            return f"/{name} is not available on the {screen.value.replace('_', ' ')} screen."

        try:
            return await handler(state, arg_text.strip())
        except TaskpadError as exc:
            logger.debug("/%s failed: %r", name, exc)
            return str(exc)

    def build_help(self, screen: Screen) -> str:
        lines = [f"Available commands ({screen.value.replace('_', ' ')}):"]
        for name, help_text in self._help.items():
            if screen in self._screens[name]:
                lines.append(f"  /{name} - {help_text}")
        lines.append("  /exit - Quit.")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting / parsing helpers ----


def format_task_list(state: AppState) -> str:
    shown = actions.visible_tasks(state)
    total = len(state.tasks.tasks)
    header = f"Tasks [{state.task_filter.value}] {len(shown)} of {total}:"
    if not shown:
        return header + "\n  (nothing here - add one with /add <title>)"
    lines = [header]
    for i, t in enumerate(shown, start=1):
        mark = "x" if t.completed else " "
        desc = f" - {t.description}" if t.description else ""
        lines.append(f"  {i}. [{mark}] {t.title}{desc}")
    return "\n".join(lines)


def split_title_description(text: str) -> tuple[str, str]:
    """'<title> | <description>' -> (title, description)."""
    title, _, description = text.partition("|")
    return title.strip(), description.strip()


COMPLETED_FLAGS = {"--done": True, "--open": False}


def split_completed_flag(text: str) -> tuple[str, bool | None]:
    """Strip a trailing --done / --open; None when neither is given."""
    head, _, last = text.strip().rpartition(" ")
    if last.lower() in COMPLETED_FLAGS:
        return head.strip(), COMPLETED_FLAGS[last.lower()]
    return text.strip(), None


def resolve_task(state: AppState, ref: str) -> Task:
    """A 1-based row number of the visible list, or a raw task id."""
    ref = ref.strip()
    if ref.isdigit():
        shown = actions.visible_tasks(state)
        idx = int(ref) - 1
        if 0 <= idx < len(shown):
            return shown[idx]
        raise TaskNotFound(ref)
    task = state.tasks.get(ref)
    if task is None:
        raise TaskNotFound(ref)
    return task


# ---- commands: all screens ----


async def cmd_help(state: AppState, args: str) -> str:
    return registry.build_help(state.session.screen)


async def cmd_whoami(state: AppState, args: str) -> str:
    who = state.session.username or "nobody"
    return f"Signed in as: {who} (screen: {state.session.screen.value.replace('_', ' ')})"


# ---- commands: login / register ----


async def cmd_login(state: AppState, args: str) -> str:
    parts = args.split()
    username = parts[0] if parts else ""
    password = parts[1] if len(parts) > 1 else ""
    user = await actions.login(state, username, password)
    return f"Welcome, {user.username}. Loading tasks... (/help for commands)"


async def cmd_register(state: AppState, args: str) -> str:
    """
    On the login screen: open the registration screen.
    On the registration screen: /register <username> <password> <confirm>.
    """
    if state.session.screen == Screen.LOGIN:
        actions.open_register(state)
        return "Registration: /register <username> <password> <confirm>  (/back to return)"

    parts = args.split()
    parts += [""] * (3 - len(parts))
    user = await actions.register(state, parts[0], parts[1], parts[2])
    return f"Account created. Welcome, {user.username}. (/help for commands)"


async def cmd_back(state: AppState, args: str) -> str:
    actions.back_to_login(state)
    return "Login: /login <username> <password>  (/register to create an account)"


# ---- commands: task manager ----


async def cmd_list(state: AppState, args: str) -> str:
    return format_task_list(state)


async def cmd_add(state: AppState, args: str) -> str:
    text, completed = split_completed_flag(args)
    title, description = split_title_description(text)
    await actions.add_task(state, title, description, bool(completed))
    return f"Added: {title}" + (" (completed)" if completed else "")


async def cmd_edit(state: AppState, args: str) -> str:
    """
    /edit <n> [<title>] [| <description>] [--done | --open]

    Whatever is left out keeps the task's current value; "| " alone clears the description.
    """
    ref, _, rest = args.partition(" ")
    if not ref:
        return "Usage: /edit <n> [<title>] [| <description>] [--done | --open]"
    task = resolve_task(state, ref)
    text, completed = split_completed_flag(rest)
    title, description = split_title_description(text)
    if "|" not in text:
        description = task.description
    title = title or task.title
    if completed is None:
        completed = task.completed
    await actions.edit_task(state, task.id or "", title, description, completed)
    return f"Saved: {title}"


async def cmd_done(state: AppState, args: str) -> str:
    if not args:
        return "Usage: /done <n>"
    task = resolve_task(state, args)
    await actions.toggle_task(state, task.id or "")
    return f"{'Reopened' if task.completed else 'Completed'}: {task.title}"


async def cmd_del(state: AppState, args: str) -> str:
    if not args:
        return "Usage: /del <n>"
    task = resolve_task(state, args)
    await actions.delete_task(state, task.id or "")
    return f"Deleted: {task.title}"


async def cmd_filter(state: AppState, args: str) -> str:
    if not args:
        return f"Filter is {state.task_filter.value}. Use /filter all | completed | ongoing."
    try:
        actions.set_filter(state, args)
    except ValueError as exc:
        return str(exc)
    return format_task_list(state)


async def cmd_logout(state: AppState, args: str) -> str:
    await actions.logout(state)
    return "Logged out."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("whoami", cmd_whoami, help_text="Show the signed-in user.")

registry.register(
    "login", cmd_login, help_text="Log in: /login <username> <password>.", screens=[Screen.LOGIN]
)
registry.register(
    "register",
    cmd_register,
    help_text="Create an account: /register, then /register <username> <password> <confirm>.",
    screens=[Screen.LOGIN, Screen.REGISTER],
)
registry.register("back", cmd_back, help_text="Back to login.", screens=[Screen.REGISTER])

_TM = [Screen.TASK_MANAGER]
registry.register("list", cmd_list, help_text="Show tasks (current filter).", screens=_TM, aliases=["ls"])
registry.register(
    "add", cmd_add, help_text="Add a task: /add <title> [| <description>] [--done].", screens=_TM
)
registry.register(
    "edit",
    cmd_edit,
    help_text="Edit a task: /edit <n> [<title>] [| <description>] [--done | --open].",
    screens=_TM,
)
registry.register("done", cmd_done, help_text="Toggle completed: /done <n>.", screens=_TM, aliases=["toggle"])
registry.register("del", cmd_del, help_text="Delete a task: /del <n>.", screens=_TM, aliases=["rm"])
registry.register(
    "filter", cmd_filter, help_text="Filter the list: /filter all | completed | ongoing.", screens=_TM
)
registry.register("logout", cmd_logout, help_text="Log out.", screens=_TM)
