from __future__ import annotations

import logging
import time
from collections import Counter
from dataclasses import replace
from datetime import datetime
from threading import RLock
from typing import Callable, List, Optional, Union

from .errors import NotFoundError, PersistenceError, StoreDisposedError
from .filters import ViewFilter, ViewQuery, parse_filter
from .kv import get_medium
from .models import Category, Task, TaskStats
from .persistence import TaskPersistence
from .schemas import CategoryInput, TaskDraft
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

Listener = Callable[[], None]
WarningHandler = Callable[[PersistenceError], None]


# PUBLIC_INTERFACE
class TaskStore:
    """
    In-memory task collection with validation, derived views and write-through
    persistence.

    Every committed mutation is written to the persistence adapter. A failed
    write does not undo the mutation: it is logged, kept in last_warning,
    handed to on_warning, and is_durable drops to False until a later write
    succeeds.

    Returned tasks are copies; mutate the store only through its methods.
    """

    def __init__(
        self,
        persistence: TaskPersistence,
        *,
        clock: Callable[[], float] = time.time,
        now: Callable[[], datetime] = datetime.now,
        on_warning: Optional[WarningHandler] = None,
    ) -> None:
        self._lock = RLock()
        self._persistence = persistence
        self._clock = clock
        self._now = now
        self._on_warning = on_warning
        self._tasks: List[Task] = []
        self._query = ViewQuery()
        self._editing_id: Optional[int] = None
        self._last_id = 0
        self._listeners: List[Listener] = []
        self._disposed = False
        self.last_warning: Optional[PersistenceError] = None
        self.is_durable = True

    # ---- lifecycle ----

    def load_initial(self) -> List[Task]:
        """
        Replace the collection with what the adapter holds and reset view state.

        Corrupt or unreadable storage yields an empty collection and a warning.
        """
        with self._lock:
            self._check_alive()
            self._tasks = list(self._persistence.load())
            self._last_id = max((t.id for t in self._tasks), default=0)
            self._query = ViewQuery()
            self._editing_id = None
            if self._persistence.last_error is not None:
                self._warn(self._persistence.last_error)
            logger.info("Task store ready tasks=%s", len(self._tasks))
            loaded = self._copies(self._tasks)
        self._notify()
        return loaded

    def dispose(self) -> None:
        """Drop in-memory state and listeners and close the medium. Safe to call twice."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            self._tasks = []
            self._listeners.clear()
            self._editing_id = None
            self._persistence.close()
        logger.info("Task store disposed")

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ---- mutations ----

    def add(self, raw_text: str, category: CategoryInput) -> Task:
        """
        Validate and append a new task.

        Raises:
            EmptyTextError, TextTooLongError, UnencodableTextError, InvalidCategoryError
        """
        with self._lock:
            self._check_alive()
            draft = TaskDraft.parse(raw_text, category)
            task = Task(
                id=self._allocate_id(),
                text=draft.text,
                category=draft.category,
                done=False,
                created_at=self._now(),
            )
            self._tasks.append(task)
            logger.debug("Added task id=%s category=%s", task.id, task.category.value)
            self._persist()
            result = task.model_copy()
        self._notify()
        return result

    def edit(self, task_id: int, new_text: str, new_category: CategoryInput) -> Task:
        """
        Replace text and category of an existing task; id, done and
        created_at are kept. Ends the edit marker if it was on this task.

        Raises:
            EmptyTextError, TextTooLongError, UnencodableTextError, InvalidCategoryError,
            NotFoundError
        """
        with self._lock:
            self._check_alive()
            draft = TaskDraft.parse(new_text, new_category)
            task = self._tasks[self._index(task_id)]
            task.text = draft.text
            task.category = draft.category
            if self._editing_id == task_id:
                self._editing_id = None
            logger.debug("Edited task id=%s", task_id)
            self._persist()
            result = task.model_copy()
        self._notify()
        return result

    def toggle_done(self, task_id: int) -> Task:
        with self._lock:
            self._check_alive()
            task = self._tasks[self._index(task_id)]
            task.done = not task.done
            logger.debug("Toggled task id=%s done=%s", task_id, task.done)
            self._persist()
            result = task.model_copy()
        self._notify()
        return result

    def delete(self, task_id: int) -> None:
        with self._lock:
            self._check_alive()
            del self._tasks[self._index(task_id)]
            if self._editing_id == task_id:
                self._editing_id = None
            logger.debug("Deleted task id=%s", task_id)
            self._persist()
        self._notify()

    def clear_all(self) -> None:
        with self._lock:
            self._check_alive()
            removed = len(self._tasks)
            self._tasks = []
            self._editing_id = None
            logger.debug("Cleared %s tasks", removed)
            self._persist()
        self._notify()

    # ---- view state ----

    def set_filter(self, filter_spec: Union[ViewFilter, str]) -> None:
        """Select 'all', 'active', 'completed' or a category. Raises InvalidFilterError."""
        with self._lock:
            self._check_alive()
            self._query = replace(self._query, filter=parse_filter(filter_spec))
        self._notify()

    def set_search(self, text: Optional[str]) -> None:
        with self._lock:
            self._check_alive()
            self._query = replace(self._query, search=text or "")
        self._notify()

    @property
    def filter(self) -> ViewFilter:
        return self._query.filter

    @property
    def search(self) -> str:
        return self._query.search

    def begin_edit(self, task_id: int) -> None:
        """Mark task_id as being edited, replacing any previous marker."""
        with self._lock:
            self._check_alive()
            self._index(task_id)
            self._editing_id = task_id
        self._notify()

    def end_edit(self) -> None:
        with self._lock:
            self._check_alive()
            self._editing_id = None
        self._notify()

    @property
    def editing_id(self) -> Optional[int]:
        return self._editing_id

    # ---- queries ----

    def get(self, task_id: int) -> Task:
        with self._lock:
            self._check_alive()
            return self._tasks[self._index(task_id)].model_copy()

    def tasks(self) -> List[Task]:
        """Full collection in insertion order."""
        with self._lock:
            self._check_alive()
            return self._copies(self._tasks)

    def visible_tasks(self) -> List[Task]:
        """Tasks passing both the current filter and search, in collection order."""
        with self._lock:
            self._check_alive()
            return self._copies(self._query.apply(self._tasks))

    def stats(self) -> TaskStats:
        """Counts over the full collection, ignoring filter and search."""
        with self._lock:
            self._check_alive()
            total = len(self._tasks)
            completed = sum(1 for t in self._tasks if t.done)
            counts = Counter(t.category for t in self._tasks)
            return TaskStats(
                total=total,
                active=total - completed,
                completed=completed,
                per_category={c: counts[c] for c in Category if counts[c]},
            )

    # ---- change notification ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a zero-argument callback run after every state change.
        A callback that raises is logged and does not affect the caller
        or the remaining callbacks.

        Returns a function that unregisters it.
        """
        with self._lock:
            self._check_alive()
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # ---- internals ----

    def _check_alive(self) -> None:
        if self._disposed:
            raise StoreDisposedError()

    def _index(self, task_id: int) -> int:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        raise NotFoundError(task_id)

    def _allocate_id(self) -> int:
        # Millisecond clock reading, bumped past the last id when the clock stalls or goes back
        new_id = max(int(self._clock() * 1000), self._last_id + 1)
        self._last_id = new_id
        return new_id

    def _persist(self) -> None:
        try:
            self._persistence.save(self._tasks)
        except PersistenceError as exc:
            self.is_durable = False
            logger.warning("Tasks kept in memory only: %s", exc)
            self._warn(exc)
        else:
            self.is_durable = True

    def _warn(self, exc: PersistenceError) -> None:
        self.last_warning = exc
        if self._on_warning is not None:
            self._on_warning(exc)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Task store listener failed")

    @staticmethod
    def _copies(tasks: List[Task]) -> List[Task]:
        return [t.model_copy() for t in tasks]


# PUBLIC_INTERFACE
def create_store(settings: Optional[Settings] = None, **kwargs) -> TaskStore:
    """
    Build a TaskStore from settings (medium -> adapter -> store) and load the
    persisted collection. Extra keyword arguments go to TaskStore.
    """
    settings = settings or get_settings()
    persistence = TaskPersistence(get_medium(settings), key=settings.storage_key)
    store = TaskStore(persistence, **kwargs)
    store.load_initial()
    return store
