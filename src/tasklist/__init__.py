"""
Task list state manager.

This package holds the task store (validation, filtering, search, stats and
edit state) and the persistence adapter that mirrors the collection into a
flat key-value medium.
"""

from .errors import (  # noqa: F401
    CorruptDataError,
    EmptyTextError,
    InvalidCategoryError,
    InvalidFilterError,
    NotFoundError,
    PersistenceError,
    StoreDisposedError,
    TaskListError,
    TaskValidationError,
    TextTooLongError,
    UnencodableTextError,
)
from .models import MAX_TEXT_LENGTH, Category, StatusFilter, Task, TaskStats  # noqa: F401
from .schemas import normalize_text, remaining_chars  # noqa: F401
from .persistence import TaskPersistence  # noqa: F401
from .store import TaskStore, create_store  # noqa: F401
