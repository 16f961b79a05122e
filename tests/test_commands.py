# tests/test_commands.py

from __future__ import annotations

from protracker.cli.commands import CommandRegistry, registry
from protracker.core.state import AppState
from protracker.tasks.task_models import TaskStatus


def test_command_registry_routes_2_and_3_params(state: AppState) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, confirm):
        called["h3"] += 1
        assert confirm is not None and confirm("sure?")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b", aliases=["bee"])

    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/BEE y", confirm=lambda _: True) == "h3"
    assert called == {"h2": 1, "h3": 1}


def test_command_registry_unknown_and_non_command(state: AppState) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_add_and_list(state: AppState) -> None:
    assert "Added" in registry.handle(state, "/add Write report")
    registry.handle(state, "/add Review PR")

    out = registry.handle(state, "/list")
    lines = out.splitlines()
    assert lines[0].startswith("1. [Pending] Review PR")
    assert lines[1].startswith("2. [Pending] Write report")
    assert lines[-1] == "Total: 2 | Pending: 2 | In progress: 0 | Done: 0 | 0% complete"


def test_add_blank_title_reports_usage(state: AppState) -> None:
    assert "Usage" in registry.handle(state, "/add")
    assert "Usage" in registry.handle(state, "/add    ")
    assert len(state.task_store) == 0


def test_mark_by_position_and_list_filter_keeps_positions(state: AppState) -> None:
    registry.handle(state, "/add Write report")
    registry.handle(state, "/add Review PR")

    assert registry.handle(state, "/mark 2 done") == '"Write report" -> Done.'
    assert registry.handle(state, "/mark 2 c") == '"Write report" is already Done.'

    out = registry.handle(state, "/list done")
    assert out.splitlines()[0].startswith("2. [Done] Write report")
    assert "50% complete" in out

    assert registry.handle(state, "/list in_progress") == "No tasks with status in_progress."
    assert "Usage" in registry.handle(state, "/list archived")


def test_mark_by_id(state: AppState) -> None:
    task = state.task_store.add_task("by id")
    registry.handle(state, f"/mark {task.id} ip")
    assert state.task_store.get_task(task.id).status is TaskStatus.IN_PROGRESS


def test_mark_errors(state: AppState) -> None:
    state.task_store.add_task("x")
    assert "Usage" in registry.handle(state, "/mark 1")
    assert "Unknown status" in registry.handle(state, "/mark 1 archived")
    assert registry.handle(state, "/mark 9 done") == "No task 9."


def test_delete_asks_for_confirmation(state: AppState) -> None:
    state.task_store.add_task("keep")
    questions: list[str] = []

    def deny(q: str) -> bool:
        questions.append(q)
        return False

    assert registry.handle(state, "/del 1", confirm=deny) == "Cancelled."
    assert questions == ['Delete "keep"?']
    assert len(state.task_store) == 1

    assert registry.handle(state, "/rm 1", confirm=lambda _: True) == 'Deleted "keep".'
    assert len(state.task_store) == 0
    assert registry.handle(state, "/del 1") == "No task 1."


def test_stats_and_help(state: AppState) -> None:
    a = state.task_store.add_task("a")
    state.task_store.add_task("b")
    state.task_store.add_task("c")
    state.task_store.update_status(a.id, TaskStatus.DONE)

    assert registry.handle(state, "/stats") == (
        "Total: 3 | Pending: 2 | In progress: 0 | Done: 1 | 33% complete"
    )
    help_text = registry.handle(state, "/help")
    for name in ("/add", "/list", "/mark", "/del", "/stats"):
        assert name in help_text


def test_raw_args_command_gets_text_after_name(state: AppState) -> None:
    reg = CommandRegistry()
    seen: list[list[str]] = []

    def h(state, args):
        seen.append(args)
        return "ok"

    reg.register("say", h, "say", aliases=["s"], raw_args=True)
    reg.register("split", h, "split")

    reg.handle(state, "/say  a   b ")
    reg.handle(state, "/S x")
    reg.handle(state, "/say")
    reg.handle(state, "/split a   b")

    assert seen == [["a   b "], ["x"], [], ["a", "b"]]
