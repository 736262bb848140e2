from __future__ import annotations

from typing import Optional


class TaskListError(Exception):
    """Base class for every error raised by the task list core."""


# PUBLIC_INTERFACE
class TaskValidationError(TaskListError, ValueError):
    """
    Input rejected before it reaches the collection.

    The operation is aborted and no state changes; the message is suitable
    for showing to the user.
    """


class EmptyTextError(TaskValidationError):
    def __init__(self) -> None:
        super().__init__("Task text cannot be empty")


class TextTooLongError(TaskValidationError):
    def __init__(self, length: int, limit: int) -> None:
        self.length = length
        self.limit = limit
        super().__init__(f"Task text is {length} characters; the limit is {limit}")


class UnencodableTextError(TaskValidationError):
    def __init__(self) -> None:
        super().__init__("Task text contains characters that cannot be stored")


class InvalidCategoryError(TaskValidationError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Unknown category: {value!r}")


class InvalidFilterError(TaskListError, ValueError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Unknown filter: {value!r}")


# PUBLIC_INTERFACE
class NotFoundError(TaskListError, LookupError):
    """
    No task has the given id.

    Usually means the caller acted on a stale view; only the offending
    operation is aborted.
    """

    def __init__(self, task_id: int) -> None:
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


# PUBLIC_INTERFACE
class PersistenceError(TaskListError):
    """
    The key-value medium could not be written (or read).

    In-memory state stays authoritative; callers treat this as a warning.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        super().__init__(message)


class CorruptDataError(PersistenceError):
    """The persisted slot exists but does not decode into a task collection."""


class StoreDisposedError(TaskListError, RuntimeError):
    def __init__(self) -> None:
        super().__init__("Task store has been disposed")
