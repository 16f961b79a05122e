# tests/fakes.py

from __future__ import annotations

import threading
import time

from protracker.tasks.blob_store import BlobStoreError


class RecordingBlobStore:
    """
    In-memory BlobStore that keeps every write for assertions.

    - `writes` is the ordered list of (key, blob) pairs
    - `delay` slows each write down to expose ordering bugs in async writers
    """

    def __init__(self, initial: dict[str, str] | None = None, delay: float = 0.0) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.writes: list[tuple[str, str]] = []
        self.reads: list[str] = []
        self.delay = delay
        self._lock = threading.Lock()

    def read(self, key: str) -> str | None:
        self.reads.append(key)
        return self.data.get(key)

    def write(self, key: str, blob: str) -> None:
        if self.delay:
            time.sleep(self.delay)
        with self._lock:
            self.data[key] = blob
            self.writes.append((key, blob))


class FailingBlobStore(RecordingBlobStore):
    """BlobStore whose reads and/or writes raise BlobStoreError."""

    def __init__(
        self,
        *,
        fail_reads: bool = False,
        fail_writes: bool = True,
        initial: dict[str, str] | None = None,
    ) -> None:
        super().__init__(initial)
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.write_attempts = 0

    def read(self, key: str) -> str | None:
        if self.fail_reads:
            raise BlobStoreError("disk unavailable")
        return super().read(key)

    def write(self, key: str, blob: str) -> None:
        self.write_attempts += 1
        if self.fail_writes:
            raise BlobStoreError("disk full")
        super().write(key, blob)


class StepClock:
    """Deterministic clock; with step=0 it returns the same instant forever."""

    def __init__(self, start: float = 1_700_000_000.0, step: float = 0.0) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value
