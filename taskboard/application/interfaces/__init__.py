"""Application ports (Protocols) implemented by infrastructure."""

from taskboard.application.interfaces.repositories import (
    ICommentRepository,
    ITaskFileRepository,
    ITaskRepository,
    IUserRepository,
)
from taskboard.application.interfaces.storage import IStorageService

__all__ = [
    "ICommentRepository",
    "IStorageService",
    "ITaskFileRepository",
    "ITaskRepository",
    "IUserRepository",
]
