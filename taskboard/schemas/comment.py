"""Comment API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CommentCreateRequest(BaseModel):
    body: str = Field(..., min_length=1, max_length=10_000)


class CommentResponse(BaseModel):
    """Comment with its author's display fields."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    task_id: str
    body: str
    author_id: str
    author_name: str
    author_picture_url: str | None = None
    created_at: datetime
