"""User API: getCurrentUser and saveUser for the bearer token's identity."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from taskboard.api.v1.dependencies import (
    CurrentPrincipal,
    get_user_service,
    get_user_service_for_write,
)
from taskboard.application.services import UserService
from taskboard.core.limiter import limit_writes
from taskboard.schemas.user import UserResponse

router = APIRouter()


@router.get("/me", response_model=UserResponse | None)
async def get_current_user(
    principal: CurrentPrincipal,
    user_svc: Annotated[UserService, Depends(get_user_service)],
):
    """Saved user for the caller; null when anonymous or not saved yet."""
    user = await user_svc.get_current_user(principal)
    return UserResponse.model_validate(user) if user else None


@router.post("/me", response_model=UserResponse)
@limit_writes
async def save_user(
    request: Request,
    principal: CurrentPrincipal,
    user_svc: Annotated[UserService, Depends(get_user_service_for_write)],
):
    """Create the caller's user on first sign-in; idempotent afterwards."""
    user = await user_svc.save_user(principal)
    return UserResponse.model_validate(user)
