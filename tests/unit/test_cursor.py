"""Keyset cursor codec."""

from datetime import UTC, datetime

import pytest

from taskboard.application.dtos.task import TaskResult
from taskboard.application.services.cursor import (
    CursorPosition,
    decode_cursor,
    encode_cursor,
    position_of,
    sort_value,
)
from taskboard.domain.enums import SortKey, SortOrder, TaskStatus, Visibility
from taskboard.domain.exceptions import InvalidCursorException
from taskboard.domain.task_list import TaskListSpec


def _task(**overrides) -> TaskResult:
    values = dict(
        id="t1",
        number=7,
        title="Write docs",
        description="",
        status=TaskStatus.IN_PROGRESS,
        visibility=Visibility.PUBLIC,
        owner_id=None,
        owner_name=None,
        comment_count=3,
        file_count=0,
        created_at=datetime(2026, 1, 1, tzinfo=UTC),
        updated_at=datetime(2026, 1, 1, tzinfo=UTC),
    )
    values.update(overrides)
    return TaskResult(**values)


def test_sort_value_per_key() -> None:
    task = _task(owner_name="Bo")
    assert sort_value(task, SortKey.NUMBER) == 7
    assert sort_value(task, SortKey.TITLE) == "Write docs"
    assert sort_value(task, SortKey.STATUS) == 2
    assert sort_value(task, SortKey.OWNER) == "Bo"
    assert sort_value(task, SortKey.COMMENT_COUNT) == 3


def test_unowned_task_sorts_by_empty_owner_name() -> None:
    assert sort_value(_task(), SortKey.OWNER) == ""


def test_cursor_is_url_safe_and_decodes() -> None:
    spec = TaskListSpec(sort_key=SortKey.TITLE, sort_order=SortOrder.ASC)
    cursor = encode_cursor(spec, position_of(_task(title="a/b+c?"), spec))
    assert "=" not in cursor
    assert "/" not in cursor and "+" not in cursor
    assert decode_cursor(spec, cursor) == CursorPosition(value="a/b+c?", number=7)


def test_cursor_rejected_for_different_spec() -> None:
    spec = TaskListSpec()
    cursor = encode_cursor(spec, CursorPosition(value=5, number=5))
    other = TaskListSpec(status_filter=(TaskStatus.NEW,))
    with pytest.raises(InvalidCursorException) as exc_info:
        decode_cursor(other, cursor)
    assert exc_info.value.error_code == "INVALID_CURSOR"


@pytest.mark.parametrize("garbage", ["not base64 !!", "e30", "W10", "eyJ2IjoxfQ"])
def test_malformed_cursor_rejected(garbage: str) -> None:
    with pytest.raises(InvalidCursorException):
        decode_cursor(TaskListSpec(), garbage)


def test_cursor_value_type_must_match_sort_key() -> None:
    number_spec = TaskListSpec()
    forged = encode_cursor(number_spec, CursorPosition(value="x", number=1))
    with pytest.raises(InvalidCursorException):
        decode_cursor(number_spec, forged)
