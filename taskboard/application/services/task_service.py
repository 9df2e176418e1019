"""Task mutations: numbering on create and the ownership gate on create/update."""

from __future__ import annotations

import logging
from typing import Any

from taskboard.application.dtos.task import (
    UNSET,
    NewTaskInfo,
    TaskChanges,
    TaskCreated,
    TaskResult,
)
from taskboard.application.dtos.user import Principal, UserResult
from taskboard.application.interfaces.repositories import ITaskRepository
from taskboard.application.services.user_service import UserService
from taskboard.domain.enums import TaskStatus, Visibility
from taskboard.domain.exceptions import (
    AuthorizationException,
    OwnerMismatchException,
    ResourceNotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 500


def _clean_title(title: str) -> str:
    cleaned = title.strip()
    if not cleaned:
        raise ValidationException("Task title must not be empty", field="title")
    if len(cleaned) > TITLE_MAX_LENGTH:
        raise ValidationException(
            f"Task title must be at most {TITLE_MAX_LENGTH} characters", field="title"
        )
    return cleaned


def _owner_columns(owner_id: str | None, user: UserResult) -> dict[str, Any]:
    """owner_id and owner_name are written together: both null or both the caller's."""
    if owner_id is None:
        return {"owner_id": None, "owner_name": None}
    if owner_id != user.id:
        raise OwnerMismatchException(owner_id, user.id)
    return {"owner_id": user.id, "owner_name": user.name}


class TaskService:
    """createTask and updateTask.

    Both run inside the request's transaction. Task numbers come from the
    repository's sequence row, which serialises concurrent creators, so a
    number is never handed out twice even though creation looks like
    "max + 1" from the outside.
    """

    def __init__(self, task_repo: ITaskRepository, user_service: UserService) -> None:
        self._tasks = task_repo
        self._users = user_service

    async def create_task(self, principal: Principal | None, info: NewTaskInfo) -> TaskCreated:
        """Create a task owned by the caller (or unowned) and assign its number.

        Raises:
            AuthenticationException: No saved user for the principal.
            OwnerMismatchException: info.owner_id names someone other than the caller.
            ValidationException: Empty or overlong title.
        """
        user = await self._users.require_user(principal)
        owner = _owner_columns(info.owner_id, user)
        title = _clean_title(info.title)
        number = await self._tasks.next_number()
        created = await self._tasks.create_task(
            number=number,
            info=NewTaskInfo(
                title=title,
                description=info.description,
                status=TaskStatus(info.status),
                visibility=Visibility(info.visibility),
                owner_id=owner["owner_id"],
            ),
            owner_id=owner["owner_id"],
            owner_name=owner["owner_name"],
        )
        logger.info("Created task %s (#%d) by user %s", created.id, created.number, user.id)
        return TaskCreated(id=created.id, number=created.number)

    async def update_task(
        self, principal: Principal | None, task_id: str, changes: TaskChanges
    ) -> TaskResult:
        """Apply a partial update. Only the task's owner may edit it.

        The number, counters and creation time are never touched.
        """
        user = await self._users.require_user(principal)
        task = await self._tasks.get_by_id(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        if task.owner_id != user.id:
            raise AuthorizationException("task", "update")
        if changes.is_empty():
            return task

        values: dict[str, Any] = {}
        if changes.title is not UNSET:
            values["title"] = _clean_title(changes.title)
        if changes.description is not UNSET:
            values["description"] = changes.description
        if changes.status is not UNSET:
            values["status"] = TaskStatus(changes.status)
        if changes.visibility is not UNSET:
            values["visibility"] = Visibility(changes.visibility)
        if changes.owner_id is not UNSET:
            values.update(_owner_columns(changes.owner_id, user))

        updated = await self._tasks.update_fields(task_id, values)
        logger.info("Updated task %s fields=%s", task_id, sorted(values))
        return updated
