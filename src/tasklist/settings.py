from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Settings:
    """
    Task list settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'sqlite'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/tasks.db'
    - TASKS_STORAGE_KEY: key of the slot holding the task collection. Default 'tasks'
    - STORAGE_QUOTA_CHARS: optional write quota (characters) for the memory backend
    """

    persistence_backend: str
    sqlite_db_path: str
    storage_key: str
    storage_quota_chars: Optional[int]


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_quota(value: str) -> Optional[int]:
    v = value.strip()
    if not v:
        return None
    try:
        quota = int(v)
    except ValueError:
        return None
    return quota if quota > 0 else None


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite"}:
        # Fallback to memory if unsupported
        backend = "memory"

    return Settings(
        persistence_backend=backend,
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/tasks.db").strip(),
        storage_key=_get_env("TASKS_STORAGE_KEY", "tasks").strip() or "tasks",
        storage_quota_chars=_parse_quota(_get_env("STORAGE_QUOTA_CHARS", "")),
    )
