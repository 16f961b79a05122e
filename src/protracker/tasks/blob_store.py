# src/protracker/tasks/blob_store.py

from __future__ import annotations

import contextlib
import hashlib
import logging
import os
import re
import sqlite3
import threading
import time
from pathlib import Path

logger = logging.getLogger(__name__)


class BlobStoreError(RuntimeError):
    """Durable storage could not be read or written."""


class SqliteBlobStore:
    """
    SQLite key/blob store.

    One row per key; writes are an UPSERT inside a single transaction, so a
    concurrent reader sees either the old or the new value.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("SqliteBlobStore ready db=%s", self._db_path)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise BlobStoreError(f"cannot open {self._db_path}: {e}") from e
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS blobs (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        except sqlite3.Error as e:
            raise BlobStoreError(f"cannot create schema in {self._db_path}: {e}") from e
        finally:
            conn.close()

    # ---- public API ----

    def read(self, key: str) -> str | None:
        try:
            conn = self._get_conn()
            try:
                row = conn.execute("SELECT value FROM blobs WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise BlobStoreError(f"read failed key={key!r}: {e}") from e
        return None if row is None else str(row[0])

    def write(self, key: str, blob: str) -> None:
        try:
            conn = self._get_conn()
            try:
                with conn:
                    conn.execute(
                        """
                        INSERT INTO blobs(key, value, updated_at)
                        VALUES (?, ?, ?)
                        ON CONFLICT(key) DO UPDATE
                            SET value = excluded.value,
                                updated_at = excluded.updated_at
                        """,
                        (key, blob, time.time()),
                    )
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise BlobStoreError(f"write failed key={key!r}: {e}") from e
        logger.debug("Blob written key=%s bytes=%d", key, len(blob.encode("utf-8")))


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class FileBlobStore:
    """
    One UTF-8 file per key under `root_dir`.

    Writes go to a temp file first and are moved into place with os.replace,
    which is atomic on the same filesystem.
    """

    def __init__(self, root_dir: str | Path) -> None:
        self._root = Path(root_dir)
        self._root.mkdir(parents=True, exist_ok=True)
        logger.info("FileBlobStore ready dir=%s", self._root)

    def path_for(self, key: str) -> Path:
        if not key:
            raise ValueError("key is required")
        name = _UNSAFE_CHARS.sub("_", key).lstrip(".") or "_"
        if name != key:
            # Sanitizing is lossy ("@a" and "_a" both give "_a"); the digest keeps keys apart.
            digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:16]
            name = f"{name}-{digest}"
        return self._root / f"{name}.json"

    def read(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text("utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise BlobStoreError(f"read failed {path}: {e}") from e

    def write(self, key: str, blob: str) -> None:
        path = self.path_for(key)
        tmp = path.with_suffix(".tmp")
        try:
            tmp.write_text(blob, "utf-8")
            os.replace(tmp, path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise BlobStoreError(f"write failed {path}: {e}") from e
        with contextlib.suppress(OSError):
            # Task titles are personal; keep the file private on disk.
            os.chmod(path, 0o600)
        logger.debug("Blob written path=%s", path)


class MemoryBlobStore:
    """Process-local store; useful for embedding the tracker without disk state."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def read(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def write(self, key: str, blob: str) -> None:
        with self._lock:
            self._data[key] = blob


def open_blob_store(settings) -> SqliteBlobStore | FileBlobStore:
    """Build the backend selected by settings.storage_backend."""
    backend = str(getattr(settings, "storage_backend", "sqlite")).lower()
    if backend == "sqlite":
        return SqliteBlobStore(settings.tasks_db_path)
    if backend == "file":
        return FileBlobStore(settings.tasks_dir)
    raise ValueError(f"unknown storage backend: {backend!r}")
