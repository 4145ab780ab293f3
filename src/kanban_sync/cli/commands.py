# src/kanban_sync/cli/commands.py

from __future__ import annotations

import logging
import shlex
from collections.abc import Awaitable, Callable

from ..core.state import AppState
from ..tasks.task_models import Task, TaskStatus, to_display_id

CommandHandler = Callable[[AppState, list[str]], Awaitable[str]]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /list, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Store failures are not caught here: they propagate to the caller.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError:
            parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return await handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _task_id(raw: str) -> str:
    # accept "7" as well as "TASK-7"
    return to_display_id(raw) or raw


def format_task(task: Task) -> str:
    return (
        f"{task.id} [{task.status.value}] {task.title} "
        f"({task.priority}/{task.type}, {task.assignee.name or 'Unassigned'})"
    )


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str]) -> str:
    store = state.store
    selected = store.selected_task.id if store.selected_task else "none"
    error = f"{state.errors.message} ({state.errors.details})" if state.errors.active else "none"
    return (
        "Status:\n"
        f"  Backend: {getattr(state.settings, 'api_base_url', '?')}\n"
        f"  Tasks loaded: {len(store.tasks)}\n"
        f"  Selected: {selected}\n"
        f"  Last error: {error}"
    )


async def cmd_load(state: AppState, args: list[str]) -> str:
    tasks = await state.store.fetch_tasks()
    return f"Loaded {len(tasks)} task(s)."


async def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list           -> all columns
    /list <status>  -> one column (todo | inprogress | done)
    """
    columns = [TaskStatus.parse(args[0])] if args else list(TaskStatus)
    tasks = state.store.tasks
    lines: list[str] = []
    for column in columns:
        in_column = [t for t in tasks if t.status == column]
        lines.append(f"{column.value.upper()} ({len(in_column)})")
        lines.extend(f"  {format_task(t)}" for t in in_column)
    return "\n".join(lines)


async def cmd_show(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /show <id>"
    task = await state.store.refresh_task(_task_id(args[0]))
    lines = [format_task(task)]
    if task.description:
        lines.append(f"  {task.description}")
    return "\n".join(lines)


async def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title> [description]
    Quote multi-word values: /add "Fix login" "Social accounts fail"
    """
    if not args:
        return 'Usage: /add "<title>" ["<description>"]'
    data = {"title": args[0]}
    if len(args) > 1:
        data["description"] = " ".join(args[1:])
    task = await state.store.create_task(data)
    return f"Created {format_task(task)}"


async def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <id> field=value [field=value ...]"""
    if len(args) < 2:
        return "Usage: /edit <id> field=value [field=value ...]"
    updates: dict[str, object] = {}
    for pair in args[1:]:
        key, sep, value = pair.partition("=")
        if not sep:
            return f"Expected field=value, got: {pair}"
        if key == "assignee":
            name = value.strip()
            initials = "".join(w[0] for w in name.split()[:2]).upper() or "UN"
            updates[key] = {"name": name, "avatar": initials}
        else:
            updates[key] = value
    task = await state.store.update_task(_task_id(args[0]), updates)
    return f"Updated {format_task(task)}"


async def cmd_move(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /move <id> <todo|inprogress|done>"
    task = await state.store.move_task(_task_id(args[0]), args[1].lower())
    return f"Moved {format_task(task)}"


async def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <id>"
    task_id = _task_id(args[0])
    await state.store.delete_task(task_id)
    return f"Deleted {task_id}."


async def cmd_select(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /select <id>"
    task_id = _task_id(args[0])
    task = state.store.get_task(task_id)
    if task is None:
        return f"No task {task_id} in the loaded collection."
    state.store.select_task(task)
    return f"Selected {task_id}."


async def cmd_unselect(state: AppState, args: list[str]) -> str:
    state.store.clear_selected_task()
    return "Selection cleared."


async def cmd_error(state: AppState, args: list[str]) -> str:
    """
    /error        -> show the last reported failure
    /error clear  -> acknowledge it
    """
    if args and args[0].lower() == "clear":
        state.errors.clear()
        return "Error cleared."
    if not state.errors.active:
        return "No error."
    details = f"\n  {state.errors.details}" if state.errors.details else ""
    return f"{state.errors.message}{details}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show backend, counts, selection and last error.")
registry.register("load", cmd_load, help_text="Reload all tasks from the backend.", aliases=["fetch"])
registry.register("list", cmd_list, help_text="Show the board: /list [todo|inprogress|done].", aliases=["ls"])
registry.register("show", cmd_show, help_text="Re-read one task from the backend: /show <id>.")
registry.register("add", cmd_add, help_text='Create a task: /add "<title>" ["<description>"].')
registry.register("edit", cmd_edit, help_text="Update fields: /edit <id> field=value ...")
registry.register("move", cmd_move, help_text="Change column: /move <id> <todo|inprogress|done>.")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <id>.", aliases=["delete"])
registry.register("select", cmd_select, help_text="Select a loaded task: /select <id>.")
registry.register("unselect", cmd_unselect, help_text="Clear the selection.")
registry.register("error", cmd_error, help_text="Show or clear the last error: /error [clear].")
