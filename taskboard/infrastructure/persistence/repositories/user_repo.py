"""User repository. Interface methods return application DTOs."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.application.dtos.user import UserResult
from taskboard.domain.exceptions import ResourceNotFoundException
from taskboard.infrastructure.persistence.models.user import User
from taskboard.infrastructure.persistence.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def _user_to_result(u: User) -> UserResult:
    """Map ORM User to application UserResult."""
    return UserResult(
        id=u.id,
        token_identifier=u.token_identifier,
        name=u.name,
        picture_url=u.picture_url,
    )


class UserRepository(BaseRepository[User]):
    """User repository. Implements IUserRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def get_by_id(self, user_id: str) -> UserResult | None:
        user = await self.get_model(user_id)
        return _user_to_result(user) if user else None

    async def get_by_token_identifier(self, token_identifier: str) -> UserResult | None:
        result = await self.db.execute(
            select(User).where(User.token_identifier == token_identifier)
        )
        user = result.scalar_one_or_none()
        return _user_to_result(user) if user else None

    async def create_user(
        self, token_identifier: str, name: str, picture_url: str | None
    ) -> UserResult:
        """Insert in a savepoint; a concurrent insert of the same subject wins and is returned."""
        user = User(token_identifier=token_identifier, name=name, picture_url=picture_url)
        try:
            async with self.db.begin_nested():
                self.db.add(user)
                await self.db.flush()
        except IntegrityError:
            logger.info("User for subject already created concurrently; reusing it")
            existing = await self.get_by_token_identifier(token_identifier)
            if existing is None:
                raise
            return existing
        await self.db.refresh(user)
        return _user_to_result(user)

    async def update_profile(
        self, user_id: str, name: str, picture_url: str | None
    ) -> UserResult:
        user = await self.get_model(user_id)
        if user is None:
            raise ResourceNotFoundException("user", user_id)
        user.name = name
        user.picture_url = picture_url
        await self.db.flush()
        return _user_to_result(user)
