"""User API schemas."""

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """Saved user record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    token_identifier: str
    name: str
    picture_url: str | None = None
