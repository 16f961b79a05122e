# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from protracker.core.state import AppState
from protracker.tasks.task_store import TaskStore

from .fakes import RecordingBlobStore, StepClock


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and AppState.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="protracker-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        storage_backend="sqlite",
        tasks_db_path=tmp_path / "tasks.sqlite3",
        tasks_dir=tmp_path / "blobs",
        storage_key="@protracker_tasks",
        background_writes=False,
    )


@pytest.fixture()
def blob_store() -> RecordingBlobStore:
    return RecordingBlobStore()


@pytest.fixture()
def clock() -> StepClock:
    # Frozen: every task is created "in the same millisecond".
    return StepClock()


@pytest.fixture()
def store(blob_store: RecordingBlobStore, clock: StepClock) -> TaskStore:
    s = TaskStore(blob_store, clock=clock)
    s.hydrate()
    return s


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore) -> AppState:
    return AppState(settings=settings, task_store=store)
