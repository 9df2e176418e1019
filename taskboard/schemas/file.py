"""Task attachment API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class TaskFileResponse(BaseModel):
    """Attachment metadata. The storage location is not exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    task_id: str
    uploader_id: str
    filename: str
    mime_type: str
    file_size: int
    checksum: str
    created_at: datetime


class SafeFilesResponse(BaseModel):
    """getSafeFiles: accepted MIME types and the size limit in bytes."""

    model_config = ConfigDict(from_attributes=True)

    mime_types: list[str]
    max_bytes: int
