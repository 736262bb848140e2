from datetime import datetime

import pytest
from pydantic import ValidationError

from src.tasklist.errors import (
    EmptyTextError,
    InvalidCategoryError,
    InvalidFilterError,
    TaskValidationError,
    TextTooLongError,
    UnencodableTextError,
)
from src.tasklist.filters import ViewQuery, matches_filter, matches_search, parse_filter
from src.tasklist.models import MAX_TEXT_LENGTH, Category, StatusFilter, Task
from src.tasklist.schemas import TaskDraft, coerce_category, normalize_text, remaining_chars


def task(text="Buy milk", category=Category.PERSONAL, done=False, task_id=1):
    return Task(id=task_id, text=text, category=category, done=done, created_at=datetime(2025, 1, 1))


class TestTextRules:
    def test_normalize_trims(self):
        assert normalize_text("  Buy milk \n") == "Buy milk"

    def test_normalize_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            normalize_text("")
        with pytest.raises(TaskValidationError):
            normalize_text("a" * (MAX_TEXT_LENGTH + 1))

    def test_boundaries(self):
        assert normalize_text("a") == "a"
        assert len(normalize_text("a" * MAX_TEXT_LENGTH)) == MAX_TEXT_LENGTH
        with pytest.raises(EmptyTextError):
            normalize_text(" ")
        with pytest.raises(TextTooLongError) as excinfo:
            normalize_text("a" * 250)
        assert excinfo.value.limit == MAX_TEXT_LENGTH
        assert "250" in str(excinfo.value)

    def test_remaining_chars(self):
        assert remaining_chars("") == 200
        assert remaining_chars("  hello  ") == 195
        assert remaining_chars("z" * 210) == -10

    def test_remaining_chars_exported_for_input_hints(self):
        from src.tasklist import remaining_chars as exported

        assert exported is remaining_chars

    def test_lone_surrogate_rejected(self):
        with pytest.raises(UnencodableTextError):
            normalize_text("\ud83d")
        with pytest.raises(TaskValidationError):
            normalize_text("  trimmed \udc00 ")
        assert normalize_text(" full emoji \U0001f600 ") == "full emoji \U0001f600"

    def test_task_model_rejects_bad_text(self):
        with pytest.raises(ValidationError):
            task(text="   ")
        with pytest.raises(ValidationError):
            task(text="b" * 201)


class TestCategories:
    def test_members(self):
        assert [c.value for c in Category] == ["work", "personal", "urgent", "other"]

    @pytest.mark.parametrize("raw,expected", [
        ("work", Category.WORK),
        ("URGENT", Category.URGENT),
        (" personal ", Category.PERSONAL),
        (Category.OTHER, Category.OTHER),
    ])
    def test_coerce(self, raw, expected):
        assert coerce_category(raw) is expected

    @pytest.mark.parametrize("raw", ["", "hobby", None, 3])
    def test_coerce_rejects(self, raw):
        with pytest.raises(InvalidCategoryError):
            coerce_category(raw)

    def test_draft_checks_text_first(self):
        with pytest.raises(EmptyTextError):
            TaskDraft.parse("", "hobby")
        assert TaskDraft.parse(" Call mom ", "personal") == TaskDraft("Call mom", Category.PERSONAL)


class TestFilters:
    @pytest.mark.parametrize("raw,expected", [
        ("all", StatusFilter.ALL),
        ("Active", StatusFilter.ACTIVE),
        ("completed", StatusFilter.COMPLETED),
        ("urgent", Category.URGENT),
        (StatusFilter.ACTIVE, StatusFilter.ACTIVE),
        (Category.WORK, Category.WORK),
    ])
    def test_parse_filter(self, raw, expected):
        assert parse_filter(raw) is expected

    @pytest.mark.parametrize("raw", ["", "done", None])
    def test_parse_filter_rejects(self, raw):
        with pytest.raises(InvalidFilterError):
            parse_filter(raw)

    def test_matches_filter(self):
        open_work = task(category=Category.WORK)
        done_work = task(category=Category.WORK, done=True)

        assert matches_filter(open_work, StatusFilter.ALL)
        assert matches_filter(open_work, StatusFilter.ACTIVE)
        assert not matches_filter(done_work, StatusFilter.ACTIVE)
        assert matches_filter(done_work, StatusFilter.COMPLETED)
        assert matches_filter(done_work, Category.WORK)
        assert not matches_filter(done_work, Category.OTHER)

    def test_matches_search(self):
        item = task(text="Buy MILK today")
        assert matches_search(item, "")
        assert matches_search(item, "milk")
        assert matches_search(item, "y mi")
        assert not matches_search(item, "bread")

    def test_view_query_apply_keeps_order(self):
        tasks = [
            task(text="Milk", task_id=1, done=True),
            task(text="Bread", task_id=2),
            task(text="Oat milk", task_id=3, done=True),
        ]
        query = ViewQuery(filter=StatusFilter.COMPLETED, search="MILK")
        assert [t.id for t in query.apply(tasks)] == [1, 3]
        assert [t.id for t in ViewQuery().apply(tasks)] == [1, 2, 3]
