"""UserService unit tests with a mocked repository."""

from unittest.mock import AsyncMock

import pytest

from taskboard.application.dtos.user import Principal, UserResult
from taskboard.application.services.user_service import UserService
from taskboard.domain.exceptions import AuthenticationException

ALICE = Principal(subject="idp|alice", name="Alice", picture_url="https://img/alice.png")


def _user(name: str = "Alice", picture: str | None = "https://img/alice.png") -> UserResult:
    return UserResult(id="u1", token_identifier="idp|alice", name=name, picture_url=picture)


async def test_get_current_user_anonymous_is_none() -> None:
    repo = AsyncMock()
    assert await UserService(repo).get_current_user(None) is None
    repo.get_by_token_identifier.assert_not_called()


async def test_save_user_without_principal_raises() -> None:
    with pytest.raises(AuthenticationException) as exc_info:
        await UserService(AsyncMock()).save_user(None)
    assert "without authentication" in exc_info.value.message


async def test_save_user_creates_on_first_call() -> None:
    repo = AsyncMock()
    repo.get_by_token_identifier = AsyncMock(return_value=None)
    repo.create_user = AsyncMock(return_value=_user())
    result = await UserService(repo).save_user(ALICE)
    assert result.id == "u1"
    repo.create_user.assert_awaited_once_with(
        token_identifier="idp|alice", name="Alice", picture_url="https://img/alice.png"
    )


async def test_save_user_returns_existing_unchanged() -> None:
    repo = AsyncMock()
    repo.get_by_token_identifier = AsyncMock(return_value=_user())
    result = await UserService(repo).save_user(ALICE)
    assert result == _user()
    repo.create_user.assert_not_called()
    repo.update_profile.assert_not_called()


async def test_save_user_refreshes_changed_profile() -> None:
    repo = AsyncMock()
    repo.get_by_token_identifier = AsyncMock(return_value=_user(name="Old name"))
    repo.update_profile = AsyncMock(return_value=_user())
    await UserService(repo).save_user(ALICE)
    repo.update_profile.assert_awaited_once_with("u1", "Alice", "https://img/alice.png")


async def test_require_user_without_saved_user_raises() -> None:
    repo = AsyncMock()
    repo.get_by_token_identifier = AsyncMock(return_value=None)
    with pytest.raises(AuthenticationException):
        await UserService(repo).require_user(ALICE)
