# src/protracker/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing touches the filesystem at import time.
- Every value has a sane local default so the tracker runs out of the box.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "PROTRACKER"

STORAGE_BACKENDS = ("sqlite", "file")
DEFAULT_STORAGE_KEY = "@protracker_tasks"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Storage ----
    data_dir: Path
    storage_backend: str
    tasks_db_path: Path
    tasks_dir: Path
    storage_key: str

    # ---- Persistence tuning ----
    background_writes: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "protracker").strip() or "protracker"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/protracker"))

        storage_backend = _env(_k("STORAGE_BACKEND"), "sqlite").strip().lower()
        if storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"{_k('STORAGE_BACKEND')} must be one of {', '.join(STORAGE_BACKENDS)}, "
                f"got {storage_backend!r}"
            )

        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        tasks_dir = _env_path(_k("TASKS_DIR"), data_dir / "blobs")
        storage_key = _env(_k("STORAGE_KEY"), DEFAULT_STORAGE_KEY).strip() or DEFAULT_STORAGE_KEY

        background_writes = _env_bool(_k("BACKGROUND_WRITES"), False)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            storage_backend=storage_backend,
            tasks_db_path=tasks_db_path,
            tasks_dir=tasks_dir,
            storage_key=storage_key,
            background_writes=background_writes,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Load settings once per process (reads .env on first call)."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS
