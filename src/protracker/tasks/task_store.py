# src/protracker/tasks/task_store.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import replace

from ..config import DEFAULT_STORAGE_KEY
from ..core.ports import BlobStore, BlobWriter
from .blob_writer import SyncBlobWriter
from .task_models import (
    Task,
    TaskDecodeError,
    TaskFilter,
    TaskMetrics,
    TaskStatus,
    decode_tasks,
    encode_tasks,
)

logger = logging.getLogger(__name__)


class TaskValidationError(ValueError):
    """Rejected input; the collection was not touched."""


class TaskStore:
    """
    In-memory task collection with full-snapshot persistence.

    Lifecycle:
    - construct, then hydrate() once to load the last saved snapshot
    - every mutation (add/update/delete) rewrites the whole collection under one key

    The in-memory list is the source of truth for the running process:
    a failed write is logged by the writer and never undoes a mutation.

    Not thread-safe; drive it from one thread (the writer may have its own).
    """

    def __init__(
        self,
        blob_store: BlobStore,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        writer: BlobWriter | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not key:
            raise ValueError("storage key is required")
        self._blob_store = blob_store
        self._key = key
        self._writer: BlobWriter = writer if writer is not None else SyncBlobWriter(blob_store)
        self._clock = clock

        self._tasks: list[Task] = []
        self._last_id = 0
        self._hydrated = False

    @property
    def key(self) -> str:
        return self._key

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    # ---- startup ----

    def hydrate(self) -> int:
        """
        Load the last persisted snapshot.

        Missing, unreadable or malformed data leaves the collection empty.
        Returns the number of tasks loaded.
        """
        if self._hydrated:
            logger.warning("TaskStore.hydrate called twice key=%s; ignoring.", self._key)
            return len(self._tasks)
        self._hydrated = True

        try:
            blob = self._blob_store.read(self._key)
        except Exception:
            # BlobStoreError or anything a custom backend raises: never fatal here.
            logger.exception("Failed to read tasks key=%s; starting empty.", self._key)
            self._tasks = []
            return 0

        if blob is None:
            logger.info("No saved tasks under key=%s; starting empty.", self._key)
            self._tasks = []
            return 0

        try:
            loaded = decode_tasks(blob)
        except TaskDecodeError as e:
            logger.warning("Saved tasks under key=%s are unreadable (%s); starting empty.", self._key, e)
            self._tasks = []
            return 0

        self._tasks = loaded
        self._seed_id_counter()
        logger.info("Hydrated %d tasks from key=%s", len(loaded), self._key)
        return len(loaded)

    def _seed_id_counter(self) -> None:
        numeric: list[int] = []
        for t in self._tasks:
            # isdigit() alone admits "²" and other non-ASCII digits.
            if not (t.id.isascii() and t.id.isdigit()):
                continue
            try:
                numeric.append(int(t.id))
            except ValueError:
                # longer than the int conversion limit; such an id can never collide with ours
                logger.warning("Ignoring oversized numeric task id (%d digits)", len(t.id))
        self._last_id = max(numeric, default=0)

    # ---- ids ----

    def _new_id(self) -> str:
        """
        Millisecond timestamp, bumped past the last issued id.

        Two creations inside the same millisecond (or a clock that goes back)
        still get distinct, increasing ids.
        """
        candidate = max(int(self._clock() * 1000), self._last_id + 1)
        existing = {t.id for t in self._tasks}
        while str(candidate) in existing:
            candidate += 1
        self._last_id = candidate
        return str(candidate)

    # ---- mutations ----

    def add_task(self, title: str) -> Task:
        clean = (title or "").strip()
        if not clean:
            raise TaskValidationError("title is required")

        task = Task(id=self._new_id(), title=clean, status=TaskStatus.PENDING)
        self._tasks.insert(0, task)
        logger.debug("Task added id=%s", task.id)
        self._persist()
        return task

    def update_status(self, task_id: str, new_status: TaskStatus | str) -> Task | None:
        """
        Set the status of one task in place.

        Unknown id -> None (nothing written). An invalid status is a caller bug
        and raises ValueError.
        """
        status = TaskStatus(new_status)

        for idx, task in enumerate(self._tasks):
            if task.id == task_id:
                updated = replace(task, status=status)
                self._tasks[idx] = updated
                logger.debug("Task status id=%s %s -> %s", task_id, task.status.value, status.value)
                self._persist()
                return updated
        return None

    def delete_task(self, task_id: str) -> bool:
        for idx, task in enumerate(self._tasks):
            if task.id == task_id:
                del self._tasks[idx]
                logger.debug("Task deleted id=%s", task_id)
                self._persist()
                return True
        return False

    def _persist(self) -> None:
        try:
            blob = encode_tasks(self._tasks)
        except (TypeError, ValueError):
            logger.exception("Failed to encode tasks key=%s; skipping write.", self._key)
            return
        self._writer.submit(self._key, blob)

    # ---- reads ----

    def get_task(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def filtered_view(self, task_filter: TaskFilter | TaskStatus | str = TaskFilter.ALL) -> list[Task]:
        flt = TaskFilter.coerce(task_filter)
        return [t for t in self._tasks if flt.matches(t)]

    def metrics(self) -> TaskMetrics:
        return TaskMetrics.from_tasks(self._tasks)

    # ---- shutdown ----

    def flush(self) -> None:
        self._writer.flush()

    def close(self) -> None:
        self._writer.close()
