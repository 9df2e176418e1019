"""Domain layer: enums, exceptions, task list value objects and view state.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from taskboard.domain.enums import (
    LoadStatus,
    LookupState,
    OwnerCategory,
    SortKey,
    SortOrder,
    TaskStatus,
    Visibility,
)
from taskboard.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    InvalidCursorException,
    OwnerMismatchException,
    ResourceNotFoundException,
    TaskboardException,
    ValidationException,
)
from taskboard.domain.task_list import ListTasksQuery, TaskListSpec

__all__ = [
    "AuthenticationException",
    "AuthorizationException",
    "InvalidCursorException",
    "ListTasksQuery",
    "LoadStatus",
    "LookupState",
    "OwnerCategory",
    "OwnerMismatchException",
    "ResourceNotFoundException",
    "SortKey",
    "SortOrder",
    "TaskListSpec",
    "TaskStatus",
    "TaskboardException",
    "ValidationException",
    "Visibility",
]
