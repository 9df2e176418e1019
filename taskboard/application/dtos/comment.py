"""DTOs for task comments (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CommentResult:
    """Comment with its author's display fields."""

    id: str
    task_id: str
    body: str
    author_id: str
    author_name: str
    author_picture_url: str | None
    created_at: datetime
