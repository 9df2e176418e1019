"""Application services: identity resolution, task mutations and reads, comments, files."""

from taskboard.application.services.comment_service import CommentService
from taskboard.application.services.file_service import FileService
from taskboard.application.services.task_query_service import TaskQueryService
from taskboard.application.services.task_service import TaskService
from taskboard.application.services.user_service import UserService

__all__ = [
    "CommentService",
    "FileService",
    "TaskQueryService",
    "TaskService",
    "UserService",
]
