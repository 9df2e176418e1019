"""Task reads: single task lookup, edit access, and the paginated task list."""

from __future__ import annotations

from taskboard.application.dtos.task import TaskLookup, TaskPage, TaskResult
from taskboard.application.dtos.user import Principal
from taskboard.application.interfaces.repositories import ITaskRepository
from taskboard.application.services.cursor import decode_cursor, encode_cursor, position_of
from taskboard.application.services.user_service import UserService
from taskboard.domain.enums import LookupState, Visibility
from taskboard.domain.exceptions import ValidationException
from taskboard.domain.task_list import ListTasksQuery


def is_visible_to(task: TaskResult, viewer_id: str | None) -> bool:
    """Public tasks are visible to everyone; private ones only to their owner."""
    return task.visibility is Visibility.PUBLIC or (
        viewer_id is not None and task.owner_id == viewer_id
    )


class TaskQueryService:
    """getTask, edit access and listTasks."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        user_service: UserService,
        max_page_size: int = 100,
    ) -> None:
        self._tasks = task_repo
        self._users = user_service
        self._max_page_size = max_page_size

    async def _viewer_id(self, principal: Principal | None) -> str | None:
        user = await self._users.get_current_user(principal)
        return user.id if user else None

    async def get_task(self, principal: Principal | None, number: int) -> TaskLookup:
        """Task by number, or NOT_FOUND (also for private tasks of other users)."""
        task = await self._tasks.get_by_number(number)
        if task is None or not is_visible_to(task, await self._viewer_id(principal)):
            return TaskLookup(state=LookupState.NOT_FOUND)
        return TaskLookup(state=LookupState.FOUND, task=task)

    async def get_edit_access(self, principal: Principal | None, number: int) -> TaskLookup:
        """FOUND only when the caller owns the task; NO_PERMISSION otherwise."""
        viewer_id = await self._viewer_id(principal)
        task = await self._tasks.get_by_number(number)
        if task is None or not is_visible_to(task, viewer_id):
            return TaskLookup(state=LookupState.NOT_FOUND)
        if viewer_id is None or task.owner_id != viewer_id:
            return TaskLookup(state=LookupState.NO_PERMISSION)
        return TaskLookup(state=LookupState.FOUND, task=task)

    async def list_tasks(self, principal: Principal | None, query: ListTasksQuery) -> TaskPage:
        """One page of tasks matching query.spec, resuming after query.cursor.

        Raises:
            ValidationException: num_items out of range.
            InvalidCursorException: Cursor malformed or issued for another spec.
        """
        if query.num_items < 1 or query.num_items > self._max_page_size:
            raise ValidationException(
                f"num_items must be between 1 and {self._max_page_size}", field="num_items"
            )
        spec = query.spec
        after = decode_cursor(spec, query.cursor) if query.cursor else None
        if not spec.status_filter or not spec.owner_filter:
            return TaskPage(page=[], continue_cursor=query.cursor, is_done=True)

        viewer_id = await self._viewer_id(principal)
        rows = await self._tasks.list_page(spec, viewer_id, after, query.num_items + 1)
        page = rows[: query.num_items]
        continue_cursor = (
            encode_cursor(spec, position_of(page[-1], spec)) if page else query.cursor
        )
        return TaskPage(
            page=page,
            continue_cursor=continue_cursor,
            is_done=len(rows) <= query.num_items,
        )
