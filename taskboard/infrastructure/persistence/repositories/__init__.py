"""Repository implementations of the application-layer ports."""

from taskboard.infrastructure.persistence.repositories.comment_repo import CommentRepository
from taskboard.infrastructure.persistence.repositories.file_repo import TaskFileRepository
from taskboard.infrastructure.persistence.repositories.task_repo import TaskRepository
from taskboard.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = ["CommentRepository", "TaskFileRepository", "TaskRepository", "UserRepository"]
