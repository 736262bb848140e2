"""
Persistence adapter for the task collection.

The whole collection lives in one named slot of a KeyValueMedium, encoded as
a JSON array of records:

    [{"id": 1, "text": "Buy milk", "category": "personal",
      "done": false, "createdAt": "2025-10-19T10:40:00.123456"}, ...]
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from .errors import CorruptDataError, PersistenceError
from .kv import KeyValueMedium, StorageUnavailableError
from .models import Task

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "tasks"

_TASK_LIST = TypeAdapter(List[Task])


# PUBLIC_INTERFACE
def encode(tasks: Sequence[Task]) -> str:
    """Serialize tasks to the JSON slot format, preserving order."""
    return _TASK_LIST.dump_json(list(tasks), by_alias=True).decode("utf-8")


# PUBLIC_INTERFACE
def decode(raw: str) -> List[Task]:
    """
    Parse the JSON slot format back into tasks.

    Raises:
        CorruptDataError: if raw is not valid JSON, is not an array of task
            records, holds invalid field values, or repeats an id.
    """
    try:
        tasks = _TASK_LIST.validate_json(raw)
    except ValidationError as exc:
        raise CorruptDataError(
            f"stored tasks failed validation ({exc.error_count()} errors)", exc
        ) from exc

    seen = set()
    for task in tasks:
        if task.id in seen:
            raise CorruptDataError(f"stored tasks repeat id {task.id}")
        seen.add(task.id)
    return tasks


# PUBLIC_INTERFACE
class TaskPersistence:
    """
    Reads and writes the task collection to a single slot of a medium.

    save() raises PersistenceError on write failure. load() never raises:
    a missing slot is a first run, and unreadable or corrupt data is
    reported through the log and last_error before an empty collection is
    returned.
    """

    def __init__(self, medium: KeyValueMedium, key: str = DEFAULT_STORAGE_KEY) -> None:
        self.medium = medium
        self.key = key
        self.last_error: Optional[PersistenceError] = None

    def save(self, tasks: Sequence[Task]) -> None:
        try:
            payload = encode(tasks)
        except PydanticSerializationError as exc:
            raise PersistenceError(f"could not encode tasks for slot {self.key!r}: {exc}", exc) from exc
        try:
            self.medium.set_item(self.key, payload)
        except StorageUnavailableError as exc:
            raise PersistenceError(f"could not write slot {self.key!r}: {exc}", exc) from exc

    def load(self) -> List[Task]:
        self.last_error = None
        try:
            raw = self.medium.get_item(self.key)
        except StorageUnavailableError as exc:
            self.last_error = PersistenceError(f"could not read slot {self.key!r}: {exc}", exc)
            logger.warning("Starting with no tasks: %s", self.last_error)
            return []

        if raw is None:
            return []

        try:
            return decode(raw)
        except CorruptDataError as exc:
            self.last_error = exc
            logger.warning("Discarding corrupt slot %r: %s", self.key, exc)
            return []

    def close(self) -> None:
        self.medium.close()
