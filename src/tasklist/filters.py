from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Union

from .errors import InvalidFilterError
from .models import Category, StatusFilter, Task

ViewFilter = Union[StatusFilter, Category]


# PUBLIC_INTERFACE
def parse_filter(value: Union[ViewFilter, str]) -> ViewFilter:
    """
    Normalize a filter selection.

    Accepts StatusFilter or Category members, or their string values
    ("all", "active", "completed", "work", ...), case-insensitively.
    """
    if isinstance(value, (StatusFilter, Category)):
        return value
    if isinstance(value, str):
        key = value.strip().lower()
        for enum_cls in (StatusFilter, Category):
            try:
                return enum_cls(key)
            except ValueError:
                continue
    raise InvalidFilterError(value)


def matches_filter(task: Task, view_filter: ViewFilter) -> bool:
    if view_filter is StatusFilter.ALL:
        return True
    if view_filter is StatusFilter.ACTIVE:
        return not task.done
    if view_filter is StatusFilter.COMPLETED:
        return task.done
    return task.category == view_filter


def matches_search(task: Task, search: str) -> bool:
    if not search:
        return True
    return search.lower() in task.text.lower()


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class ViewQuery:
    """
    Current view selection: one filter plus a search string.
    """
    filter: ViewFilter = StatusFilter.ALL
    search: str = ""

    def matches(self, task: Task) -> bool:
        return matches_filter(task, self.filter) and matches_search(task, self.search)

    def apply(self, tasks: Iterable[Task]) -> List[Task]:
        """Return the tasks passing both filter and search, order preserved."""
        return [t for t in tasks if self.matches(t)]
