# src/protracker/tasks/blob_writer.py

from __future__ import annotations

"""
Write pipeline between TaskStore and a BlobStore.

Two strategies:
- SyncBlobWriter: write happens inside submit(); simplest, used by default.
- BackgroundBlobWriter: one worker thread drains a FIFO queue, so the caller
  never waits on disk while writes still land in mutation order.

Neither retries. A failed write is logged and the next submit proceeds.
"""

import logging
import queue
import threading

from ..core.ports import BlobStore

logger = logging.getLogger(__name__)

_STOP = object()


class SyncBlobWriter:
    def __init__(self, store: BlobStore) -> None:
        self._store = store
        self.failed_writes = 0

    def submit(self, key: str, blob: str) -> None:
        try:
            self._store.write(key, blob)
        except Exception:
            self.failed_writes += 1
            logger.exception("Persist failed key=%s; in-memory state is kept.", key)

    def flush(self) -> None:
        return

    def close(self) -> None:
        return


class BackgroundBlobWriter:
    """
    Single-worker FIFO writer.

    Every submit() becomes exactly one store.write(); nothing is coalesced.
    The single consumer is what guarantees ordering, so never add a second one.
    """

    def __init__(self, store: BlobStore, *, name: str = "protracker-writer") -> None:
        self._store = store
        self._queue: queue.Queue[object] = queue.Queue()
        self._closed = False
        self._close_lock = threading.Lock()
        self.failed_writes = 0

        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()
        logger.debug("Background writer started thread=%s", name)

    def submit(self, key: str, blob: str) -> None:
        # Same lock as close(): nothing may be enqueued behind the stop marker.
        with self._close_lock:
            if self._closed:
                raise RuntimeError("BackgroundBlobWriter is closed")
            self._queue.put((key, blob))

    def flush(self) -> None:
        """Block until every write submitted so far has been attempted."""
        self._queue.join()

    def close(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        self._queue.put(_STOP)
        self._thread.join()
        logger.debug("Background writer stopped (failed_writes=%d)", self.failed_writes)

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                key, blob = item  # type: ignore[misc]
                try:
                    self._store.write(key, blob)
                except Exception:
                    self.failed_writes += 1
                    logger.exception("Background persist failed key=%s", key)
            finally:
                self._queue.task_done()
