"""Comment repository. Comments are append-only and read with their author's profile."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.application.dtos.comment import CommentResult
from taskboard.domain.exceptions import ResourceNotFoundException
from taskboard.infrastructure.persistence.models.comment import Comment
from taskboard.infrastructure.persistence.models.user import User
from taskboard.infrastructure.persistence.repositories.base import BaseRepository
from taskboard.shared.utils.datetime import ensure_utc


def _comment_to_result(c: Comment, author: User) -> CommentResult:
    return CommentResult(
        id=c.id,
        task_id=c.task_id,
        body=c.body,
        author_id=c.author_id,
        author_name=author.name,
        author_picture_url=author.picture_url,
        created_at=ensure_utc(c.created_at),
    )


class CommentRepository(BaseRepository[Comment]):
    """Comment repository. Implements ICommentRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Comment)

    async def add_comment(self, task_id: str, author_id: str, body: str) -> CommentResult:
        author = await self.db.get(User, author_id)
        if author is None:
            raise ResourceNotFoundException("user", author_id)
        comment = await self.add(Comment(task_id=task_id, author_id=author_id, body=body))
        return _comment_to_result(comment, author)

    async def list_for_task(self, task_id: str) -> list[CommentResult]:
        result = await self.db.execute(
            select(Comment, User)
            .join(User, Comment.author_id == User.id)
            .where(Comment.task_id == task_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return [_comment_to_result(c, u) for c, u in result.all()]
