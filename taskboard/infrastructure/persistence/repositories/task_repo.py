"""Task repository: numbering, partial updates, counters and the keyset list query."""

from __future__ import annotations

from typing import Any

from sqlalchemy import and_, false, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from taskboard.application.dtos.task import NewTaskInfo, TaskResult
from taskboard.application.services.cursor import CursorPosition
from taskboard.domain.enums import OwnerCategory, SortKey, SortOrder, TaskStatus, Visibility
from taskboard.domain.exceptions import ResourceNotFoundException
from taskboard.domain.task_list import TaskListSpec
from taskboard.infrastructure.persistence.models.task import (
    TASK_SEQUENCE_NAME,
    Task,
    TaskSequence,
)
from taskboard.infrastructure.persistence.repositories.base import BaseRepository
from taskboard.shared.utils.datetime import ensure_utc, utc_now


def _task_to_result(t: Task) -> TaskResult:
    """Map ORM Task to application TaskResult."""
    return TaskResult(
        id=t.id,
        number=t.number,
        title=t.title,
        description=t.description,
        status=TaskStatus(t.status),
        visibility=Visibility(t.visibility),
        owner_id=t.owner_id,
        owner_name=t.owner_name,
        comment_count=t.comment_count,
        file_count=t.file_count,
        created_at=ensure_utc(t.created_at),
        updated_at=ensure_utc(t.updated_at),
    )


def _column_value(value: Any) -> Any:
    if isinstance(value, TaskStatus):
        return int(value)
    if isinstance(value, Visibility):
        return value.value
    return value


def _sort_column(key: SortKey) -> ColumnElement[Any]:
    if key is SortKey.TITLE:
        return Task.title
    if key is SortKey.STATUS:
        return Task.status
    if key is SortKey.OWNER:
        return func.coalesce(Task.owner_name, "")
    if key is SortKey.COMMENT_COUNT:
        return Task.comment_count
    return Task.number


def _owner_clause(categories: frozenset[OwnerCategory], viewer_id: str | None) -> ColumnElement[bool]:
    """Owner categories are relative to the viewer; anonymous viewers own nothing."""
    clauses: list[ColumnElement[bool]] = []
    if OwnerCategory.ME in categories:
        clauses.append(Task.owner_id == viewer_id if viewer_id else false())
    if OwnerCategory.NOBODY in categories:
        clauses.append(Task.owner_id.is_(None))
    if OwnerCategory.OTHERS in categories:
        if viewer_id:
            clauses.append(and_(Task.owner_id.is_not(None), Task.owner_id != viewer_id))
        else:
            clauses.append(Task.owner_id.is_not(None))
    return or_(*clauses) if clauses else false()


def _visible_clause(viewer_id: str | None) -> ColumnElement[bool]:
    public = Task.visibility == Visibility.PUBLIC.value
    if viewer_id is None:
        return public
    return or_(public, Task.owner_id == viewer_id)


def _after_clause(
    column: ColumnElement[Any], order: SortOrder, after: CursorPosition
) -> ColumnElement[bool]:
    """Rows strictly after `after` in (sort value, number) order."""
    if order is SortOrder.ASC:
        return or_(column > after.value, and_(column == after.value, Task.number > after.number))
    return or_(column < after.value, and_(column == after.value, Task.number < after.number))


class TaskRepository(BaseRepository[Task]):
    """Task repository. Implements ITaskRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Task)

    async def next_number(self) -> int:
        """Advance the sequence row; its row lock holds until the transaction ends."""
        result = await self.db.execute(
            update(TaskSequence)
            .where(TaskSequence.name == TASK_SEQUENCE_NAME)
            .values(value=TaskSequence.value + 1)
            .returning(TaskSequence.value)
            .execution_options(synchronize_session=False)
        )
        number = result.scalar_one_or_none()
        if number is not None:
            return number
        # Sequence row missing (database created outside migrations): seed from existing tasks.
        current_max = (
            await self.db.execute(select(func.coalesce(func.max(Task.number), 0)))
        ).scalar_one()
        number = current_max + 1
        self.db.add(TaskSequence(name=TASK_SEQUENCE_NAME, value=number))
        await self.db.flush()
        return number

    async def create_task(
        self,
        number: int,
        info: NewTaskInfo,
        owner_id: str | None,
        owner_name: str | None,
    ) -> TaskResult:
        task = Task(
            number=number,
            title=info.title,
            description=info.description,
            status=int(info.status),
            visibility=Visibility(info.visibility).value,
            owner_id=owner_id,
            owner_name=owner_name,
            comment_count=0,
            file_count=0,
        )
        return _task_to_result(await self.add(task))

    async def get_by_id(self, task_id: str) -> TaskResult | None:
        task = await self.get_model(task_id)
        return _task_to_result(task) if task else None

    async def get_by_number(self, number: int) -> TaskResult | None:
        result = await self.db.execute(
            select(Task).where(Task.number == number).execution_options(populate_existing=True)
        )
        task = result.scalar_one_or_none()
        return _task_to_result(task) if task else None

    async def update_fields(self, task_id: str, values: dict[str, Any]) -> TaskResult:
        columns = {name: _column_value(value) for name, value in values.items()}
        columns["updated_at"] = utc_now()
        await self.db.execute(
            update(Task)
            .where(Task.id == task_id)
            .values(**columns)
            .execution_options(synchronize_session=False)
        )
        task = await self.get_model(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        return _task_to_result(task)

    async def _increment(self, task_id: str, column: Any, delta: int) -> None:
        await self.db.execute(
            update(Task)
            .where(Task.id == task_id)
            .values({column: column + delta})
            .execution_options(synchronize_session=False)
        )

    async def increment_comment_count(self, task_id: str, delta: int = 1) -> None:
        await self._increment(task_id, Task.comment_count, delta)

    async def increment_file_count(self, task_id: str, delta: int = 1) -> None:
        await self._increment(task_id, Task.file_count, delta)

    async def list_page(
        self,
        spec: TaskListSpec,
        viewer_id: str | None,
        after: CursorPosition | None,
        limit: int,
    ) -> list[TaskResult]:
        """Filtered, visible tasks in (sort value, number) order, resuming after `after`."""
        column = _sort_column(spec.sort_key)
        stmt = select(Task).where(
            Task.status.in_([int(s) for s in spec.status_filter]),
            _owner_clause(frozenset(spec.owner_filter), viewer_id),
            _visible_clause(viewer_id),
        )
        if after is not None:
            stmt = stmt.where(_after_clause(column, spec.sort_order, after))
        if spec.sort_order is SortOrder.ASC:
            stmt = stmt.order_by(column.asc(), Task.number.asc())
        else:
            stmt = stmt.order_by(column.desc(), Task.number.desc())
        result = await self.db.execute(
            stmt.limit(limit).execution_options(populate_existing=True)
        )
        return [_task_to_result(t) for t in result.scalars().all()]
