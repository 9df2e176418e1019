"""Task file repository (attachment metadata)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.application.dtos.file import TaskFileCreate, TaskFileResult
from taskboard.infrastructure.persistence.models.task_file import TaskFile
from taskboard.infrastructure.persistence.repositories.base import BaseRepository
from taskboard.shared.utils.datetime import ensure_utc


def _file_to_result(f: TaskFile) -> TaskFileResult:
    return TaskFileResult(
        id=f.id,
        task_id=f.task_id,
        uploader_id=f.uploader_id,
        filename=f.filename,
        mime_type=f.mime_type,
        file_size=f.file_size,
        checksum=f.checksum,
        storage_ref=f.storage_ref,
        created_at=ensure_utc(f.created_at),
    )


class TaskFileRepository(BaseRepository[TaskFile]):
    """Task file repository. Implements ITaskFileRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, TaskFile)

    async def create_file(self, data: TaskFileCreate) -> TaskFileResult:
        row = TaskFile(
            id=data.id,
            task_id=data.task_id,
            uploader_id=data.uploader_id,
            filename=data.filename,
            mime_type=data.mime_type,
            file_size=data.file_size,
            checksum=data.checksum,
            storage_ref=data.storage_ref,
        )
        return _file_to_result(await self.add(row))

    async def get_by_id(self, file_id: str) -> TaskFileResult | None:
        row = await self.get_model(file_id)
        return _file_to_result(row) if row else None

    async def list_for_task(self, task_id: str) -> list[TaskFileResult]:
        result = await self.db.execute(
            select(TaskFile)
            .where(TaskFile.task_id == task_id)
            .order_by(TaskFile.created_at.asc(), TaskFile.id.asc())
        )
        return [_file_to_result(f) for f in result.scalars().all()]

    async def delete_file(self, file_id: str) -> bool:
        row = await self.get_model(file_id)
        if row is None:
            return False
        await self.remove(row)
        return True
