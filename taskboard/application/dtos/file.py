"""DTOs for task file attachments (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TaskFileCreate:
    """Row to persist after the bytes are in storage."""

    id: str
    task_id: str
    uploader_id: str
    filename: str
    mime_type: str
    file_size: int
    checksum: str
    storage_ref: str


@dataclass(frozen=True)
class TaskFileResult:
    """Attachment metadata."""

    id: str
    task_id: str
    uploader_id: str
    filename: str
    mime_type: str
    file_size: int
    checksum: str
    storage_ref: str
    created_at: datetime


@dataclass(frozen=True)
class SafeFilePolicy:
    """Which uploads are accepted (getSafeFiles)."""

    mime_types: tuple[str, ...]
    max_bytes: int

    def allows(self, mime_type: str) -> bool:
        return mime_type.split(";", 1)[0].strip().lower() in self.mime_types
