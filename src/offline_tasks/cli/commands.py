# src/offline_tasks/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from pathlib import Path
from typing import Any, TypeVar

from ..core.errors import StorageError, TaskSyncError
from ..core.state import AppState
from ..tasks.task_api import create_task, export_tasks_json, list_tasks
from ..tasks.task_models import Location, Task, pending_count

T = TypeVar("T")

# Runs a coroutine on the engine loop and returns its result.
Runner = Callable[[Awaitable[T]], T]
CommandHandler = Callable[[AppState, list[str], Runner], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, /sync, ...)."""

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

    def handle(self, state: AppState, line: str, run: Runner) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args, run)
        except StorageError as exc:
            logger.error("Local store failure in /%s: %s", name, exc)
            return f"Local storage error: {exc}"
        except TaskSyncError as exc:
            return f"Error: {exc}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _fmt_ms(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).astimezone().strftime("%Y-%m-%d %H:%M")


def format_task(i: int, task: Task) -> str:
    mark = "x" if task.done else " "
    when = f" @ {task.scheduled_time}" if task.scheduled_time else ""
    where = f" ({task.location.lat:.4f}, {task.location.lng:.4f})" if task.location else ""
    sync = "" if task.synced else " [not synced]"
    return f"{i}. [{mark}] {task.title}{when}{where}{sync}  ({_fmt_ms(task.last_updated)})"


def parse_add_args(args: list[str]) -> dict[str, Any]:
    """
    /add [--time HH:MM] [--done] [--at LAT,LNG] title words...
    """
    out: dict[str, Any] = {"scheduled_time": "", "done": False, "location": None}
    words: list[str] = []
    it = iter(args)
    for a in it:
        if a == "--time":
            out["scheduled_time"] = next(it, "")
        elif a == "--done":
            out["done"] = True
        elif a == "--at":
            raw = next(it, "")
            try:
                lat_s, lng_s = raw.split(",", 1)
                out["location"] = Location(lat=float(lat_s), lng=float(lng_s))
            except ValueError as exc:
                raise ValueError(f"--at expects LAT,LNG, got {raw!r}") from exc
        else:
            words.append(a)
    out["title"] = " ".join(words)
    return out


def cmd_help(state: AppState, args: list[str], run: Runner) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str], run: Runner) -> str:
    try:
        fields = parse_add_args(args)
        task, summary = run(create_task(state, **fields))
    except ValueError as exc:
        return f"Usage: /add [--time HH:MM] [--done] [--at LAT,LNG] <title>  ({exc})"

    msg = f"Added: {task.title}"
    if summary is not None:
        msg += f" (synced {summary.synced_count}/{summary.total_unsynced})"
    elif not state.connectivity.is_online:
        msg += " (offline, will sync later)"
    return msg


def cmd_list(state: AppState, args: list[str], run: Runner) -> str:
    tasks = run(_async_list(state))
    if not tasks:
        return "No tasks yet."
    lines = [f"Tasks ({pending_count(tasks)} pending):"]
    lines.extend(format_task(i, t) for i, t in enumerate(tasks, start=1))
    return "\n".join(lines)


async def _async_list(state: AppState) -> list[Task]:
    return list_tasks(state)


def cmd_sync(state: AppState, args: list[str], run: Runner) -> str:
    summary = run(state.triggers.sync_and_reload("manual"))
    return f"Sync done: {summary.synced_count}/{summary.total_unsynced} synced."


def cmd_online(state: AppState, args: list[str], run: Runner) -> str:
    changed = run(state.connectivity.set_online(True))
    return "Online." if changed else "Already online."


def cmd_offline(state: AppState, args: list[str], run: Runner) -> str:
    changed = run(state.connectivity.set_online(False))
    return "Offline." if changed else "Already offline."


def cmd_status(state: AppState, args: list[str], run: Runner) -> str:
    ident = state.identity.current_identity()
    tasks = state.triggers.tasks
    unsynced = sum(1 for t in tasks if not t.synced)
    return (
        "Status:\n"
        f"  Connectivity: {'ONLINE' if state.connectivity.is_online else 'OFFLINE'}\n"
        f"  Identity: {ident.user_id if ident else '(none)'}\n"
        f"  Tasks: {len(tasks)} ({pending_count(tasks)} pending, {unsynced} not synced)\n"
        f"  Sync running: {'yes' if state.sync.is_running else 'no'}"
        f" (runs so far: {state.sync.runs_completed})\n"
        f"  Deferred background sync: {', '.join(state.background.pending_tags) or '(none)'}"
    )


def cmd_export(state: AppState, args: list[str], run: Runner) -> str:
    tasks = run(_async_list(state))
    if args:
        path = Path(args[0]).expanduser()
    else:
        data_dir = Path(getattr(state.settings, "data_dir", "."))
        path = data_dir / f"tasks-export-{int(datetime.now().timestamp() * 1000)}.json"
    export_tasks_json(tasks, path)
    return f"Exported {len(tasks)} task(s) to {path}"


def cmd_remote(state: AppState, args: list[str], run: Runner) -> str:
    tasks = run(state.remote.get_all(state.identity.current_identity()))
    if not tasks:
        return "Remote store has no tasks."
    done = sum(1 for t in tasks if t.done)
    return f"Remote store: {len(tasks)} task(s), {done} completed."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add", cmd_add, help_text="Add a task: /add [--time HH:MM] [--done] [--at LAT,LNG] <title>."
)
registry.register("list", cmd_list, help_text="List local tasks (newest first).", aliases=["ls"])
registry.register("sync", cmd_sync, help_text="Sync unsynced tasks now.")
registry.register("online", cmd_online, help_text="Mark connectivity as online.")
registry.register("offline", cmd_offline, help_text="Mark connectivity as offline.")
registry.register("status", cmd_status, help_text="Show connectivity, identity and sync state.")
registry.register("export", cmd_export, help_text="Export tasks to JSON: /export [path].")
registry.register("remote", cmd_remote, help_text="Show a summary of the remote task collection.")
