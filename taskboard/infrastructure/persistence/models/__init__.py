"""ORM models. Importing this package registers every table on Base.metadata."""

from taskboard.infrastructure.persistence.models.comment import Comment
from taskboard.infrastructure.persistence.models.task import Task, TaskSequence
from taskboard.infrastructure.persistence.models.task_file import TaskFile
from taskboard.infrastructure.persistence.models.user import User

__all__ = ["Comment", "Task", "TaskFile", "TaskSequence", "User"]
