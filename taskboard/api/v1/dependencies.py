"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the caller's identity and the application
services. Read routes get services on a plain session (get_db); write routes
get them on a transactional session (get_db_transactional) so every write
commits or rolls back as a unit.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.application.dtos.file import SafeFilePolicy
from taskboard.application.dtos.user import Principal
from taskboard.application.interfaces.storage import IStorageService
from taskboard.application.services import (
    CommentService,
    FileService,
    TaskQueryService,
    TaskService,
    UserService,
)
from taskboard.core.config import get_settings
from taskboard.infrastructure.external.storage import create_storage_service
from taskboard.infrastructure.persistence.database import (
    get_db,
    get_db_transactional,
    get_sessionmaker,
)
from taskboard.infrastructure.persistence.repositories import (
    CommentRepository,
    TaskFileRepository,
    TaskRepository,
    UserRepository,
)
from taskboard.infrastructure.security.jwt import verify_token

logger = logging.getLogger(__name__)

_http_bearer = HTTPBearer(auto_error=False)

ReadSession = Annotated[AsyncSession, Depends(get_db)]
WriteSession = Annotated[AsyncSession, Depends(get_db_transactional)]


async def get_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> Principal | None:
    """Identity from the bearer token, or None (anonymous or invalid token).

    Operations that need a user raise AuthenticationException themselves.
    """
    if not credentials:
        return None
    try:
        return verify_token(credentials.credentials)
    except ValueError as e:
        logger.debug("Ignoring bearer token: %s", e)
        return None


CurrentPrincipal = Annotated[Principal | None, Depends(get_principal)]


def get_safe_file_policy() -> SafeFilePolicy:
    settings = get_settings()
    return SafeFilePolicy(
        mime_types=tuple(settings.safe_file_type_list),
        max_bytes=settings.max_upload_size,
    )


def get_storage_service() -> IStorageService:
    return create_storage_service()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for work outside a request (live query re-runs)."""
    return get_sessionmaker()


async def get_user_service(db: ReadSession) -> UserService:
    return UserService(UserRepository(db))


async def get_user_service_for_write(db: WriteSession) -> UserService:
    return UserService(UserRepository(db))


async def get_task_service(db: WriteSession) -> TaskService:
    return TaskService(TaskRepository(db), UserService(UserRepository(db)))


async def get_task_query_service(db: ReadSession) -> TaskQueryService:
    return TaskQueryService(
        TaskRepository(db),
        UserService(UserRepository(db)),
        max_page_size=get_settings().list_page_size_max,
    )


async def get_comment_query_service(db: ReadSession) -> CommentService:
    return CommentService(CommentRepository(db), TaskRepository(db), UserService(UserRepository(db)))


async def get_comment_service(db: WriteSession) -> CommentService:
    return CommentService(CommentRepository(db), TaskRepository(db), UserService(UserRepository(db)))


def _file_service(
    db: AsyncSession, storage: IStorageService, policy: SafeFilePolicy
) -> FileService:
    return FileService(
        storage_service=storage,
        file_repo=TaskFileRepository(db),
        task_repo=TaskRepository(db),
        user_service=UserService(UserRepository(db)),
        policy=policy,
    )


async def get_file_query_service(
    db: ReadSession,
    storage: Annotated[IStorageService, Depends(get_storage_service)],
    policy: Annotated[SafeFilePolicy, Depends(get_safe_file_policy)],
) -> FileService:
    return _file_service(db, storage, policy)


async def get_file_service(
    db: WriteSession,
    storage: Annotated[IStorageService, Depends(get_storage_service)],
    policy: Annotated[SafeFilePolicy, Depends(get_safe_file_policy)],
) -> FileService:
    return _file_service(db, storage, policy)
