"""Comment append and listing."""

from __future__ import annotations

import logging

from taskboard.application.dtos.comment import CommentResult
from taskboard.application.dtos.user import Principal
from taskboard.application.interfaces.repositories import ICommentRepository, ITaskRepository
from taskboard.application.services.task_query_service import is_visible_to
from taskboard.application.services.user_service import UserService
from taskboard.domain.exceptions import ResourceNotFoundException, ValidationException

logger = logging.getLogger(__name__)

COMMENT_MAX_LENGTH = 10_000


class CommentService:
    """saveComment / listComments.

    save_comment inserts the comment and bumps task.comment_count in the
    caller's transaction; both become visible together on commit.
    """

    def __init__(
        self,
        comment_repo: ICommentRepository,
        task_repo: ITaskRepository,
        user_service: UserService,
    ) -> None:
        self._comments = comment_repo
        self._tasks = task_repo
        self._users = user_service

    async def save_comment(
        self, principal: Principal | None, task_id: str, body: str
    ) -> CommentResult:
        """Append a comment by the caller. Anonymous comments are rejected."""
        user = await self._users.require_user(principal)
        text = body.strip()
        if not text:
            raise ValidationException("Comment body must not be empty", field="body")
        if len(text) > COMMENT_MAX_LENGTH:
            raise ValidationException(
                f"Comment body must be at most {COMMENT_MAX_LENGTH} characters", field="body"
            )
        task = await self._tasks.get_by_id(task_id)
        if task is None or not is_visible_to(task, user.id):
            raise ResourceNotFoundException("task", task_id)
        comment = await self._comments.add_comment(task_id, user.id, text)
        await self._tasks.increment_comment_count(task_id, 1)
        logger.info("Comment %s added to task %s", comment.id, task_id)
        return comment

    async def list_comments(
        self, principal: Principal | None, task_id: str
    ) -> list[CommentResult]:
        """Comments oldest first; empty for unknown or hidden tasks."""
        task = await self._tasks.get_by_id(task_id)
        if task is None:
            return []
        viewer = await self._users.get_current_user(principal)
        if not is_visible_to(task, viewer.id if viewer else None):
            return []
        return await self._comments.list_for_task(task_id)
