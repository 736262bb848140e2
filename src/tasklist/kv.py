from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from threading import RLock
from typing import Dict, Optional

from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


class StorageUnavailableError(Exception):
    """The key-value medium cannot be read or written."""


class QuotaExceededError(StorageUnavailableError):
    """A write would push the medium past its size quota."""


# PUBLIC_INTERFACE
class KeyValueMedium(ABC):
    """
    Abstract contract for flat string key-value storage (browser local
    storage semantics: string keys, string values, whole-value writes).
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None if the slot is absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove the slot; absent keys are ignored."""

    def close(self) -> None:
        """Release resources held by the medium."""


class InMemoryKeyValueStore(KeyValueMedium):
    """
    Dict-backed medium suitable for testing and the default runtime.

    With a quota, the combined length of all keys and values is capped and
    writes past it raise QuotaExceededError, leaving the old value in place.
    """

    def __init__(self, quota: Optional[int] = None) -> None:
        self._lock = RLock()
        self._items: Dict[str, str] = {}
        self.quota = quota

    def _size_with(self, key: str, value: str) -> int:
        size = sum(len(k) + len(v) for k, v in self._items.items() if k != key)
        return size + len(key) + len(value)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            if self.quota is not None:
                size = self._size_with(key, value)
                if size > self.quota:
                    raise QuotaExceededError(
                        f"writing {key!r} needs {size} chars; quota is {self.quota}"
                    )
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)


# PUBLIC_INTERFACE
def get_medium(settings: Optional[Settings] = None) -> KeyValueMedium:
    """
    Factory to return the configured medium based on settings.
    - memory: InMemoryKeyValueStore
    - sqlite: SQLiteKeyValueStore; falls back to memory if the database cannot be opened
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteKeyValueStore

        try:
            return SQLiteKeyValueStore(settings.sqlite_db_path)
        except StorageUnavailableError as exc:
            logger.warning(
                "SQLite medium at %s unavailable (%s); using in-memory storage",
                settings.sqlite_db_path,
                exc,
            )
    return InMemoryKeyValueStore(quota=settings.storage_quota_chars)
