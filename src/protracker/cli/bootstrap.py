# src/protracker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the selected storage backend and write strategy into a TaskStore,
- hydrates the store before anything can mutate it.
"""

from __future__ import annotations

import logging

from ..config import DEFAULT_STORAGE_KEY, get_settings
from ..core.ports import BlobWriter
from ..core.state import AppState
from ..tasks.blob_store import open_blob_store
from ..tasks.blob_writer import BackgroundBlobWriter, SyncBlobWriter
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.tasks_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create a hydrated AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    blob_store = open_blob_store(settings)

    writer: BlobWriter
    if getattr(settings, "background_writes", False):
        writer = BackgroundBlobWriter(blob_store)
    else:
        writer = SyncBlobWriter(blob_store)

    task_store = TaskStore(
        blob_store,
        key=getattr(settings, "storage_key", DEFAULT_STORAGE_KEY),
        writer=writer,
    )
    task_store.hydrate()

    logger.info(
        "State ready backend=%s background_writes=%s tasks=%d",
        getattr(settings, "storage_backend", "sqlite"),
        getattr(settings, "background_writes", False),
        len(task_store),
    )
    return AppState(settings=settings, task_store=task_store)


def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown: drain pending writes (no exceptions should escape)."""
    try:
        state.task_store.flush()
        state.task_store.close()
    except Exception:
        logger.exception("Failed to flush pending task writes.")
