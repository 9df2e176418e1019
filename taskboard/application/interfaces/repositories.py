"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs or domain value objects only; no
infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from taskboard.application.dtos.comment import CommentResult
    from taskboard.application.dtos.file import TaskFileCreate, TaskFileResult
    from taskboard.application.dtos.task import NewTaskInfo, TaskResult
    from taskboard.application.dtos.user import UserResult
    from taskboard.application.services.cursor import CursorPosition
    from taskboard.domain.task_list import TaskListSpec


class IUserRepository(Protocol):
    """Protocol for user repository (DIP)."""

    async def get_by_id(self, user_id: str) -> UserResult | None:
        """Return user by primary key."""

    async def get_by_token_identifier(self, token_identifier: str) -> UserResult | None:
        """Return the user created for this identity-provider subject."""

    async def create_user(
        self, token_identifier: str, name: str, picture_url: str | None
    ) -> UserResult:
        """Insert a user; if the subject was inserted concurrently, return that row."""

    async def update_profile(
        self, user_id: str, name: str, picture_url: str | None
    ) -> UserResult:
        """Refresh display fields copied from the identity provider."""


class ITaskRepository(Protocol):
    """Protocol for task repository (DIP)."""

    async def next_number(self) -> int:
        """Reserve the next task number. Must run in the creating transaction."""

    async def create_task(
        self,
        number: int,
        info: NewTaskInfo,
        owner_id: str | None,
        owner_name: str | None,
    ) -> TaskResult:
        """Insert a task with zeroed counters."""

    async def get_by_id(self, task_id: str) -> TaskResult | None:
        """Return task by id."""

    async def get_by_number(self, number: int) -> TaskResult | None:
        """Return task by display number."""

    async def update_fields(self, task_id: str, values: dict[str, Any]) -> TaskResult:
        """Apply column values to one task and return the refreshed row."""

    async def increment_comment_count(self, task_id: str, delta: int = 1) -> None:
        """Adjust the denormalized comment count in SQL (no read-modify-write)."""

    async def increment_file_count(self, task_id: str, delta: int = 1) -> None:
        """Adjust the denormalized file count in SQL (no read-modify-write)."""

    async def list_page(
        self,
        spec: TaskListSpec,
        viewer_id: str | None,
        after: CursorPosition | None,
        limit: int,
    ) -> list[TaskResult]:
        """Return up to `limit` tasks matching spec, strictly after `after` in sort order."""


class ICommentRepository(Protocol):
    """Protocol for comment repository (DIP)."""

    async def add_comment(self, task_id: str, author_id: str, body: str) -> CommentResult:
        """Insert a comment stamped with the current time."""

    async def list_for_task(self, task_id: str) -> list[CommentResult]:
        """Return comments for a task, oldest first."""


class ITaskFileRepository(Protocol):
    """Protocol for task file repository (DIP)."""

    async def create_file(self, data: TaskFileCreate) -> TaskFileResult:
        """Insert attachment metadata."""

    async def get_by_id(self, file_id: str) -> TaskFileResult | None:
        """Return attachment by id."""

    async def list_for_task(self, task_id: str) -> list[TaskFileResult]:
        """Return attachments for a task, oldest first."""

    async def delete_file(self, file_id: str) -> bool:
        """Delete attachment metadata. Returns False if it did not exist."""

    def after_commit(self, callback: Callable[[], Awaitable[None]]) -> None:
        """Run callback once the surrounding transaction has committed."""
