from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_TEXT_LENGTH = 200


# PUBLIC_INTERFACE
class Category(str, Enum):
    """Fixed set of task categories."""

    WORK = "work"
    PERSONAL = "personal"
    URGENT = "urgent"
    OTHER = "other"


# PUBLIC_INTERFACE
class StatusFilter(str, Enum):
    """Completion-state filters; a Category may be used as a filter too."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


# PUBLIC_INTERFACE
class Task(BaseModel):
    """
    A single task record.

    Fields:
    - id: Unique integer identifier, assigned by the store, never reused
    - text: Trimmed description (1..200 chars)
    - category: One of Category
    - done: Completion flag
    - created_at: Creation timestamp (persisted as "createdAt")
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": 1760870400000,
                "text": "Buy milk",
                "category": "personal",
                "done": False,
                "createdAt": "2025-10-19T10:40:00.123456",
            }
        },
    )

    id: int = Field(..., description="Unique identifier of the task")
    text: str = Field(..., description="Short description of the task")
    category: Category = Field(..., description="Task category")
    done: bool = Field(default=False, description="Completion status flag")
    created_at: datetime = Field(..., alias="createdAt", description="Creation timestamp")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        s = v.strip()
        if not (1 <= len(s) <= MAX_TEXT_LENGTH):
            raise ValueError(f"text length must be between 1 and {MAX_TEXT_LENGTH} characters")
        return s


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TaskStats:
    """
    Aggregate counts over the full task collection.

    per_category only lists categories that have at least one task; use
    count() for a zero-safe lookup.
    """

    total: int = 0
    active: int = 0
    completed: int = 0
    per_category: Dict[Category, int] = field(default_factory=dict)

    def count(self, category: Category) -> int:
        return self.per_category.get(Category(category), 0)

    def as_dict(self) -> Dict[str, object]:
        return {
            "total": self.total,
            "active": self.active,
            "completed": self.completed,
            "perCategory": {c.value: n for c, n in self.per_category.items()},
        }
