# src/protracker/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    """
    Runtime state shared by the presentation layer.

    Connectors receive this object instead of reaching for globals; the task
    store inside it is the single owner of the task collection.
    """

    # Settings (or a SimpleNamespace in tests).
    settings: Any
    task_store: TaskStore
