from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .errors import EmptyTextError, InvalidCategoryError, TextTooLongError, UnencodableTextError
from .models import MAX_TEXT_LENGTH, Category

# Categories arrive from the presentation layer either as enum members or raw strings
CategoryInput = Union[Category, str]


# PUBLIC_INTERFACE
def normalize_text(raw_text: str) -> str:
    """
    Strip surrounding whitespace and enforce 1..200 length.

    Raises:
        EmptyTextError: if nothing is left after trimming.
        TextTooLongError: if the trimmed text exceeds MAX_TEXT_LENGTH.
        UnencodableTextError: if the text holds lone surrogates (e.g. a
            truncated emoji) that cannot be written as UTF-8.
    """
    s = (raw_text or "").strip()
    if not s:
        raise EmptyTextError()
    if len(s) > MAX_TEXT_LENGTH:
        raise TextTooLongError(len(s), MAX_TEXT_LENGTH)
    try:
        s.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise UnencodableTextError() from exc
    return s


# PUBLIC_INTERFACE
def coerce_category(value: CategoryInput) -> Category:
    """Return the Category for an enum member or its (case-insensitive) string value."""
    if isinstance(value, Category):
        return value
    if isinstance(value, str):
        try:
            return Category(value.strip().lower())
        except ValueError:
            pass
    raise InvalidCategoryError(value)


# PUBLIC_INTERFACE
def remaining_chars(raw_text: str) -> int:
    """Characters left before the length limit; negative once it is exceeded."""
    return MAX_TEXT_LENGTH - len((raw_text or "").strip())


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TaskDraft:
    """
    Validated user input for creating or editing a task.
    """

    text: str
    category: Category

    @classmethod
    def parse(cls, raw_text: str, category: CategoryInput) -> "TaskDraft":
        """
        Validate raw input; text is checked before category.
        """
        return cls(text=normalize_text(raw_text), category=coerce_category(category))
