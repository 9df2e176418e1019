"""DTOs for task use cases (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Final

from taskboard.domain.enums import LookupState, TaskStatus, Visibility


class _Unset:
    """Marker for 'field not provided' in partial updates (None means clear)."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset()


@dataclass(frozen=True)
class NewTaskInfo:
    """Payload for createTask. owner_id, when given, must be the caller's user id."""

    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.NEW
    visibility: Visibility = Visibility.PUBLIC
    owner_id: str | None = None


@dataclass(frozen=True)
class TaskChanges:
    """Partial payload for updateTask. Fields left UNSET are not touched."""

    title: str | _Unset = UNSET
    description: str | _Unset = UNSET
    status: TaskStatus | _Unset = UNSET
    visibility: Visibility | _Unset = UNSET
    owner_id: str | None | _Unset = UNSET

    def is_empty(self) -> bool:
        return all(
            value is UNSET
            for value in (self.title, self.description, self.status, self.visibility, self.owner_id)
        )


@dataclass(frozen=True)
class TaskResult:
    """Task read-model."""

    id: str
    number: int
    title: str
    description: str
    status: TaskStatus
    visibility: Visibility
    owner_id: str | None
    owner_name: str | None
    comment_count: int
    file_count: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class TaskCreated:
    """Result of createTask."""

    id: str
    number: int


@dataclass(frozen=True)
class TaskLookup:
    """Result of getTask / edit access: a data state plus the task when visible."""

    state: LookupState
    task: TaskResult | None = None


@dataclass(frozen=True)
class TaskPage:
    """One page of listTasks.

    continue_cursor resumes after the last row of `page`; it is None only when
    the page is empty and nothing was delivered before it.
    """

    page: list[TaskResult]
    continue_cursor: str | None
    is_done: bool

    @property
    def status(self) -> str:
        return "Exhausted" if self.is_done else "CanLoadMore"
