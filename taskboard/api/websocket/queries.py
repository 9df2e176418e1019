"""Live query operations: what each one reads and how to run it.

A live query runs in its own short-lived session each time it is evaluated
and returns JSON-ready data (the same shape as the HTTP response for the
operation). `tables` lists every table whose changes can alter the result.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.application.dtos.file import SafeFilePolicy
from taskboard.application.dtos.user import Principal
from taskboard.application.services import CommentService, TaskQueryService, UserService
from taskboard.application.services.task_query_service import is_visible_to
from taskboard.infrastructure.persistence.repositories import (
    CommentRepository,
    TaskFileRepository,
    TaskRepository,
    UserRepository,
)
from taskboard.schemas.comment import CommentResponse
from taskboard.schemas.file import SafeFilesResponse, TaskFileResponse
from taskboard.schemas.task import TaskListQueryRequest, TaskLookupResponse, TaskPageResponse
from taskboard.schemas.user import UserResponse


@dataclass(frozen=True)
class QueryContext:
    """What a live query may use: a session, the caller and the upload policy."""

    session: AsyncSession
    principal: Principal | None
    policy: SafeFilePolicy
    max_page_size: int = 100


Runner = Callable[[QueryContext, dict[str, Any]], Awaitable[Any]]


@dataclass(frozen=True)
class LiveQuery:
    name: str
    tables: frozenset[str]
    run: Runner


class LiveQueryRegistry:
    """Operation name -> LiveQuery."""

    def __init__(self) -> None:
        self._queries: dict[str, LiveQuery] = {}

    def register(self, name: str, tables: set[str] | frozenset[str], run: Runner) -> None:
        if name in self._queries:
            raise ValueError(f"Live query already registered: {name}")
        self._queries[name] = LiveQuery(name=name, tables=frozenset(tables), run=run)

    def get(self, name: str) -> LiveQuery | None:
        return self._queries.get(name)

    def names(self) -> list[str]:
        return sorted(self._queries)


class _TaskNumberArgs(BaseModel):
    number: int


class _TaskIdArgs(BaseModel):
    task_id: str


def _users(ctx: QueryContext) -> UserService:
    return UserService(UserRepository(ctx.session))


async def _get_current_user(ctx: QueryContext, args: dict[str, Any]) -> Any:
    user = await _users(ctx).get_current_user(ctx.principal)
    return UserResponse.model_validate(user).model_dump(mode="json") if user else None


async def _get_task(ctx: QueryContext, args: dict[str, Any]) -> Any:
    number = _TaskNumberArgs.model_validate(args).number
    service = TaskQueryService(TaskRepository(ctx.session), _users(ctx), ctx.max_page_size)
    lookup = await service.get_task(ctx.principal, number)
    return TaskLookupResponse.model_validate(lookup).model_dump(mode="json")


async def _list_tasks(ctx: QueryContext, args: dict[str, Any]) -> Any:
    query = TaskListQueryRequest.model_validate(args).to_query()
    service = TaskQueryService(TaskRepository(ctx.session), _users(ctx), ctx.max_page_size)
    page = await service.list_tasks(ctx.principal, query)
    return TaskPageResponse.model_validate(page).model_dump(mode="json")


async def _list_comments(ctx: QueryContext, args: dict[str, Any]) -> Any:
    task_id = _TaskIdArgs.model_validate(args).task_id
    service = CommentService(
        CommentRepository(ctx.session), TaskRepository(ctx.session), _users(ctx)
    )
    comments = await service.list_comments(ctx.principal, task_id)
    return [CommentResponse.model_validate(c).model_dump(mode="json") for c in comments]


async def _list_files(ctx: QueryContext, args: dict[str, Any]) -> Any:
    """Attachment metadata only; stored bytes are never read here."""
    task_id = _TaskIdArgs.model_validate(args).task_id
    task = await TaskRepository(ctx.session).get_by_id(task_id)
    if task is None:
        return []
    viewer = await _users(ctx).get_current_user(ctx.principal)
    if not is_visible_to(task, viewer.id if viewer else None):
        return []
    files = await TaskFileRepository(ctx.session).list_for_task(task_id)
    return [TaskFileResponse.model_validate(f).model_dump(mode="json") for f in files]


async def _get_safe_files(ctx: QueryContext, args: dict[str, Any]) -> Any:
    policy = ctx.policy
    return SafeFilesResponse(
        mime_types=list(policy.mime_types), max_bytes=policy.max_bytes
    ).model_dump(mode="json")


def build_default_registry() -> LiveQueryRegistry:
    """Registry with every read operation clients can subscribe to."""
    registry = LiveQueryRegistry()
    registry.register("getCurrentUser", {"app_user"}, _get_current_user)
    registry.register("getTask", {"task", "app_user"}, _get_task)
    registry.register("listTasks", {"task", "app_user"}, _list_tasks)
    registry.register("listComments", {"comment", "task", "app_user"}, _list_comments)
    registry.register("listFiles", {"task_file", "task", "app_user"}, _list_files)
    registry.register("getSafeFiles", set(), _get_safe_files)
    return registry
