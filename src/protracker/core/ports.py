# src/protracker/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task store.

The store depends on Protocols instead of concrete implementations.
This keeps storage backends swappable and makes testing easier.
"""

from typing import Protocol


class BlobStore(Protocol):
    """
    Opaque key -> text storage.

    - read() returns None when nothing was ever written under `key`
    - write() replaces the previous value atomically
    - I/O faults are raised as BlobStoreError
    """

    def read(self, key: str) -> str | None: ...
    def write(self, key: str, blob: str) -> None: ...


class BlobWriter(Protocol):
    """
    Ordered write pipeline in front of a BlobStore.

    submit() must apply writes in the order they were submitted.
    Failures are reported through logging, never raised to the submitter.
    """

    def submit(self, key: str, blob: str) -> None: ...
    def flush(self) -> None: ...
    def close(self) -> None: ...
