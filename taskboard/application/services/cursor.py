"""Keyset pagination cursors for the task list.

A cursor records the sort value and number of the last delivered row plus the
fingerprint of the filter/sort it was produced for. Resuming "after" that
position (instead of skipping an offset) keeps pages stable when tasks are
created concurrently, and replaying the same cursor returns the same page.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass

from taskboard.application.dtos.task import TaskResult
from taskboard.domain.enums import SortKey
from taskboard.domain.exceptions import InvalidCursorException
from taskboard.domain.task_list import TaskListSpec

_INT_KEYS = frozenset({SortKey.NUMBER, SortKey.STATUS, SortKey.COMMENT_COUNT})


@dataclass(frozen=True)
class CursorPosition:
    """Last delivered row: its sort value and its number (the tie-breaker)."""

    value: int | str
    number: int


def sort_value(task: TaskResult, key: SortKey) -> int | str:
    """Value of `task` for the given sort key (owner sorts unowned as '')."""
    if key is SortKey.NUMBER:
        return task.number
    if key is SortKey.TITLE:
        return task.title
    if key is SortKey.STATUS:
        return int(task.status)
    if key is SortKey.OWNER:
        return task.owner_name or ""
    return task.comment_count


def position_of(task: TaskResult, spec: TaskListSpec) -> CursorPosition:
    return CursorPosition(value=sort_value(task, spec.sort_key), number=task.number)


def encode_cursor(spec: TaskListSpec, position: CursorPosition) -> str:
    """Return an opaque, URL-safe cursor string."""
    raw = json.dumps(
        {"v": position.value, "n": position.number, "f": spec.fingerprint()},
        separators=(",", ":"),
    )
    return base64.urlsafe_b64encode(raw.encode()).decode().rstrip("=")


def decode_cursor(spec: TaskListSpec, cursor: str) -> CursorPosition:
    """Parse a cursor produced by encode_cursor for the same spec.

    Raises:
        InvalidCursorException: Malformed cursor, or cursor issued for another filter/sort.
    """
    padded = cursor + "=" * (-len(cursor) % 4)
    try:
        data = json.loads(base64.urlsafe_b64decode(padded.encode()))
    except (binascii.Error, ValueError, UnicodeDecodeError) as e:
        raise InvalidCursorException("not a valid cursor") from e
    if not isinstance(data, dict):
        raise InvalidCursorException("not a valid cursor")
    if data.get("f") != spec.fingerprint():
        raise InvalidCursorException("cursor belongs to a different filter or sort")
    value, number = data.get("v"), data.get("n")
    if not isinstance(number, int) or isinstance(number, bool):
        raise InvalidCursorException("missing position")
    expected = int if spec.sort_key in _INT_KEYS else str
    if not isinstance(value, expected) or isinstance(value, bool):
        raise InvalidCursorException("sort value has the wrong type")
    return CursorPosition(value=value, number=number)
