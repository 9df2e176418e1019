"""Identity resolution: map the authenticated principal to a persisted user."""

from __future__ import annotations

import logging

from taskboard.application.dtos.user import Principal, UserResult
from taskboard.application.interfaces.repositories import IUserRepository
from taskboard.domain.exceptions import AuthenticationException

logger = logging.getLogger(__name__)


class UserService:
    """getCurrentUser / saveUser, plus require_user for authenticated mutations."""

    def __init__(self, user_repo: IUserRepository) -> None:
        self._user_repo = user_repo

    async def get_current_user(self, principal: Principal | None) -> UserResult | None:
        """Return the saved user for principal, or None (anonymous or never saved)."""
        if principal is None:
            return None
        return await self._user_repo.get_by_token_identifier(principal.subject)

    async def save_user(self, principal: Principal | None) -> UserResult:
        """Create the user on first sight, otherwise return the existing record.

        Name and picture are refreshed from the token when the provider's
        claims changed. Raises AuthenticationException without a principal.
        """
        if principal is None:
            raise AuthenticationException("Called saveUser without authentication present")
        existing = await self._user_repo.get_by_token_identifier(principal.subject)
        if existing is None:
            created = await self._user_repo.create_user(
                token_identifier=principal.subject,
                name=principal.name,
                picture_url=principal.picture_url,
            )
            logger.info("Created user %s for new identity", created.id)
            return created
        if existing.name != principal.name or existing.picture_url != principal.picture_url:
            return await self._user_repo.update_profile(
                existing.id, principal.name, principal.picture_url
            )
        return existing

    async def require_user(self, principal: Principal | None) -> UserResult:
        """Return the caller's saved user or raise AuthenticationException."""
        user = await self.get_current_user(principal)
        if user is None:
            raise AuthenticationException("User identity not found")
        return user
