# src/protracker/tasks/task_models.py

from __future__ import annotations

import json
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class TaskDecodeError(ValueError):
    """Persisted task data could not be understood."""


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Any status may move to any other; there is no terminal state.
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def from_wire(cls, raw: Any) -> TaskStatus:
        if isinstance(raw, str):
            try:
                return cls(raw)
            except ValueError:
                legacy = _LEGACY_STATUS_LABELS.get(raw)
                if legacy is not None:
                    return legacy
        raise TaskDecodeError(f"unknown task status: {raw!r}")


# Labels written by the first (mobile) version of the tracker.
_LEGACY_STATUS_LABELS: dict[str, TaskStatus] = {
    "Pendente": TaskStatus.PENDING,
    "Em andamento": TaskStatus.IN_PROGRESS,
    "Concluída": TaskStatus.DONE,
}


class TaskFilter(StrEnum):
    ALL = "all"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def coerce(cls, value: TaskFilter | TaskStatus | str) -> TaskFilter:
        return cls(str(value))

    def matches(self, task: Task) -> bool:
        return self is TaskFilter.ALL or task.status.value == self.value


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    status: TaskStatus


@dataclass(frozen=True, slots=True)
class TaskMetrics:
    total: int
    pending: int
    in_progress: int
    done: int
    percent_done: int

    @classmethod
    def from_tasks(cls, tasks: Iterable[Task]) -> TaskMetrics:
        counts = Counter(t.status for t in tasks)
        total = sum(counts.values())
        done = counts[TaskStatus.DONE]
        return cls(
            total=total,
            pending=counts[TaskStatus.PENDING],
            in_progress=counts[TaskStatus.IN_PROGRESS],
            done=done,
            percent_done=_percent_half_up(done, total),
        )


def _percent_half_up(part: int, total: int) -> int:
    # Integer arithmetic: round() would do banker's rounding (50.5 -> 50).
    if total <= 0:
        return 0
    return (part * 200 + total) // (total * 2)


# ---- JSON codec ----


def task_to_dict(task: Task) -> dict[str, str]:
    return {"id": task.id, "title": task.title, "status": task.status.value}


def task_from_dict(raw: Any) -> Task:
    if not isinstance(raw, dict):
        raise TaskDecodeError(f"task record must be an object, got {type(raw).__name__}")

    tid = raw.get("id")
    # Older blobs may carry numeric ids; bool is an int subclass and is not an id.
    if isinstance(tid, int) and not isinstance(tid, bool):
        tid = str(tid)
    if not isinstance(tid, str) or not tid:
        raise TaskDecodeError(f"task record has no usable id: {raw!r}")

    title = raw.get("title")
    if not isinstance(title, str):
        raise TaskDecodeError(f"task {tid} has no title")

    return Task(id=tid, title=title, status=TaskStatus.from_wire(raw.get("status")))


def encode_tasks(tasks: Iterable[Task]) -> str:
    return json.dumps([task_to_dict(t) for t in tasks], ensure_ascii=False)


def decode_tasks(blob: str) -> list[Task]:
    try:
        data = json.loads(blob)
    except json.JSONDecodeError as e:
        raise TaskDecodeError(f"task blob is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise TaskDecodeError(f"task blob must be a JSON array, got {type(data).__name__}")

    return [task_from_dict(item) for item in data]
