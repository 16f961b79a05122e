# src/protracker/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..core.state import AppState
from ..tasks.task_models import Task, TaskFilter, TaskMetrics, TaskStatus
from ..tasks.task_store import TaskValidationError

ConfirmPrompt = Callable[[str], bool]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], ConfirmPrompt | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

STATUS_ALIASES: dict[str, TaskStatus] = {
    "p": TaskStatus.PENDING,
    "pending": TaskStatus.PENDING,
    "a": TaskStatus.IN_PROGRESS,
    "ip": TaskStatus.IN_PROGRESS,
    "in_progress": TaskStatus.IN_PROGRESS,
    "in-progress": TaskStatus.IN_PROGRESS,
    "c": TaskStatus.DONE,
    "d": TaskStatus.DONE,
    "done": TaskStatus.DONE,
}

STATUS_LABELS: dict[TaskStatus, str] = {
    TaskStatus.PENDING: "Pending",
    TaskStatus.IN_PROGRESS: "In progress",
    TaskStatus.DONE: "Done",
}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._raw: set[str] = set()

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        raw_args: bool = False,
    ) -> None:
        """
        raw_args=True hands the handler everything after the command name as a
        single untouched argument (e.g. titles with meaningful spacing).
        """
        aliases = aliases or []
        names = [name.lower()] + [a.lower() for a in aliases]
        self._help[names[0]] = help_text
        for n in names:
            self._handlers[n] = handler
            if raw_args:
                self._raw.add(n)

    def handle(
        self,
        state: AppState,
        line: str,
        confirm: ConfirmPrompt | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split(maxsplit=1)
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        rest = parts[1] if len(parts) > 1 else ""
        if name in self._raw:
            args = [rest] if rest.strip() else []
        else:
            args = rest.split()

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, confirm)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("Any line that is not a command is added as a new task.")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting ----


def format_task(position: int, task: Task) -> str:
    return f"{position}. [{STATUS_LABELS[task.status]}] {task.title}  (id={task.id})"


def format_metrics(m: TaskMetrics) -> str:
    return (
        f"Total: {m.total} | Pending: {m.pending} | In progress: {m.in_progress} | "
        f"Done: {m.done} | {m.percent_done}% complete"
    )


def resolve_task(state: AppState, ref: str) -> Task | None:
    """
    Accept either an exact task id or a 1-based position in the full list.

    Ids are checked first, so a position never shadows a real id.
    """
    store = state.task_store
    task = store.get_task(ref)
    if task is not None:
        return task
    if ref.isdigit():
        pos = int(ref)
        tasks = store.tasks
        if 1 <= pos <= len(tasks):
            return tasks[pos - 1]
    return None


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    # registered with raw_args: args is [title exactly as typed] or []
    title = args[0] if args else ""
    try:
        task = state.task_store.add_task(title)
    except TaskValidationError:
        return "Type a title for the task. Usage: /add <title>"
    return f'Added "{task.title}" (id={task.id}).'


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list              -> all tasks
    /list pending|in_progress|done
    """
    raw = args[0].lower() if args else TaskFilter.ALL.value
    status = STATUS_ALIASES.get(raw)
    try:
        flt = TaskFilter.coerce(status if status is not None else raw)
    except ValueError:
        return "Usage: /list [all|pending|in_progress|done]"

    # Positions always refer to the full list so /mark and /del stay stable under filters.
    positions = {t.id: i for i, t in enumerate(state.task_store.tasks, start=1)}
    view = state.task_store.filtered_view(flt)
    if not view:
        return "No tasks." if flt is TaskFilter.ALL else f"No tasks with status {flt.value}."

    lines = [format_task(positions[t.id], t) for t in view]
    lines.append(format_metrics(state.task_store.metrics()))
    return "\n".join(lines)


def cmd_mark(state: AppState, args: list[str]) -> str:
    """
    /mark <task> <status>   status: p|pending, a|ip|in_progress, c|d|done
    """
    if len(args) != 2:
        return "Usage: /mark <task> <pending|in_progress|done>"

    status = STATUS_ALIASES.get(args[1].lower())
    if status is None:
        return f"Unknown status: {args[1]}. Use pending, in_progress or done."

    task = resolve_task(state, args[0])
    if task is None:
        return f"No task {args[0]}."

    if task.status is status:
        return f'"{task.title}" is already {STATUS_LABELS[status]}.'

    state.task_store.update_status(task.id, status)
    return f'"{task.title}" -> {STATUS_LABELS[status]}.'


def cmd_del(state: AppState, args: list[str], confirm: ConfirmPrompt | None = None) -> str:
    """
    /del <task>   asks for confirmation when the caller provides a prompt
    """
    if len(args) != 1:
        return "Usage: /del <task>"

    task = resolve_task(state, args[0])
    if task is None:
        return f"No task {args[0]}."

    if confirm is not None and not confirm(f'Delete "{task.title}"?'):
        return "Cancelled."

    state.task_store.delete_task(task.id)
    return f'Deleted "{task.title}".'


def cmd_stats(state: AppState, args: list[str]) -> str:
    return format_metrics(state.task_store.metrics())


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add", cmd_add, help_text="Add a task: /add <title>.", aliases=["new"], raw_args=True
)
registry.register(
    "list", cmd_list, help_text="List tasks: /list [all|pending|in_progress|done].", aliases=["ls"]
)
registry.register(
    "mark", cmd_mark, help_text="Change status: /mark <task> <pending|in_progress|done>."
)
registry.register("del", cmd_del, help_text="Delete a task (asks first): /del <task>.", aliases=["rm"])
registry.register("stats", cmd_stats, help_text="Show totals and completion percentage.")
