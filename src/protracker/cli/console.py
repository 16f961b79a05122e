# src/protracker/cli/console.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.state import AppState
from .commands import ConfirmPrompt, format_metrics
from .commands import registry as command_registry

logger = logging.getLogger(__name__)

InputFn = Callable[[str], str]
OutputFn = Callable[[str], None]


def make_confirm(read: InputFn) -> ConfirmPrompt:
    def confirm(question: str) -> bool:
        try:
            answer = read(f"{question} [y/N] ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            return False
        return answer in ("y", "yes")

    return confirm


def handle_line(state: AppState, line: str, confirm: ConfirmPrompt | None = None) -> str | None:
    """
    One REPL step: slash commands go to the registry, plain text becomes a task.
    Returns the text to show, or None for blank input.
    """
    line = line.strip()
    if not line:
        return None

    try:
        reply = command_registry.handle(state, line, confirm=confirm)
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."

    if reply is not None:
        return reply

    return command_registry.handle(state, f"/add {line}", confirm=confirm)


def run_console_loop(
    state: AppState,
    *,
    read: InputFn = input,
    write: OutputFn = print,
) -> None:
    logger.info("Console started (tasks=%d).", len(state.task_store))
    write("Task tracker. Type a title to add a task, /help for commands, /exit to quit.")
    write(format_metrics(state.task_store.metrics()))

    confirm = make_confirm(read)

    while True:
        try:
            user_input = read("> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            write("")
            break

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        reply = handle_line(state, user_input, confirm)
        if reply is not None:
            write(reply)

    logger.info("Console finished.")
