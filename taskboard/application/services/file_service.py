"""Task attachments: upload (saveFile), delete (deleteFile), listing and download."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import os
import re
from collections.abc import AsyncIterator
from typing import BinaryIO

from taskboard.application.dtos.file import SafeFilePolicy, TaskFileCreate, TaskFileResult
from taskboard.application.dtos.user import Principal
from taskboard.application.interfaces.repositories import ITaskFileRepository, ITaskRepository
from taskboard.application.interfaces.storage import IStorageService
from taskboard.application.services.task_query_service import is_visible_to
from taskboard.application.services.user_service import UserService
from taskboard.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)
from taskboard.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)

_RESERVED_NAME_RE = re.compile(r"^(con|prn|aux|nul|com[1-9]|lpt[1-9])(\..*)?$", re.IGNORECASE)


def _rewind_if_seekable(file_data: BinaryIO) -> None:
    """Reset file position to start if stream is seekable."""
    if getattr(file_data, "seekable", lambda: False)():
        file_data.seek(0)


def _sanitize_filename(filename: str) -> str:
    """Strip path separators and dangerous characters from filename."""
    name = os.path.basename(filename.replace("\\", "/"))
    name = name.replace("\x00", "").strip(". ")
    if not name:
        raise ValueError("Filename is empty or invalid after sanitization")
    if _RESERVED_NAME_RE.match(name):
        raise ValueError(f"Reserved filename: {name}")
    return name


def _compute_checksum_and_size_sync(file_data: BinaryIO) -> tuple[str, int]:
    """Blocking: one pass over file_data (run in executor). Returns (hexdigest, byte_count)."""
    sha256 = hashlib.sha256()
    total = 0
    while chunk := file_data.read(65536):
        sha256.update(chunk)
        total += len(chunk)
    _rewind_if_seekable(file_data)
    return sha256.hexdigest(), total


class FileService:
    """Attachments on tasks. file_count is adjusted in the same transaction as the row."""

    def __init__(
        self,
        storage_service: IStorageService,
        file_repo: ITaskFileRepository,
        task_repo: ITaskRepository,
        user_service: UserService,
        policy: SafeFilePolicy,
    ) -> None:
        self.storage = storage_service
        self._files = file_repo
        self._tasks = task_repo
        self._users = user_service
        self.policy = policy

    def get_safe_files(self) -> SafeFilePolicy:
        """Allow-list of upload types and the size limit."""
        return self.policy

    async def save_file(
        self,
        principal: Principal | None,
        task_id: str,
        file_data: BinaryIO,
        filename: str,
        mime_type: str,
    ) -> TaskFileResult:
        """Store the bytes and attach them to a task the caller owns."""
        user = await self._users.require_user(principal)
        task = await self._tasks.get_by_id(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        if task.owner_id != user.id:
            raise AuthorizationException("file", "create")
        if not self.policy.allows(mime_type):
            raise ValidationException(f"File type not allowed: {mime_type}", field="file")
        try:
            safe_name = _sanitize_filename(filename)
        except ValueError as e:
            raise ValidationException(str(e), field="filename") from e

        checksum, file_size = await asyncio.to_thread(_compute_checksum_and_size_sync, file_data)
        if file_size > self.policy.max_bytes:
            raise ValidationException(
                f"File exceeds maximum size of {self.policy.max_bytes} bytes", field="file"
            )

        file_id = generate_cuid()
        storage_ref = f"tasks/{task_id}/files/{file_id}/{safe_name}"
        _rewind_if_seekable(file_data)
        await self.storage.upload(
            file_data=file_data,
            storage_ref=storage_ref,
            expected_checksum=checksum,
            content_type=mime_type,
            metadata={"file_id": file_id, "task_id": task_id, "uploader_id": user.id},
        )
        created = await self._files.create_file(
            TaskFileCreate(
                id=file_id,
                task_id=task_id,
                uploader_id=user.id,
                filename=safe_name,
                mime_type=mime_type,
                file_size=file_size,
                checksum=checksum,
                storage_ref=storage_ref,
            )
        )
        await self._tasks.increment_file_count(task_id, 1)
        logger.info("File %s attached to task %s (%d bytes)", file_id, task_id, file_size)
        return created

    async def delete_file(self, principal: Principal | None, file_id: str) -> None:
        """Remove an attachment. Allowed for its uploader and for the task owner."""
        user = await self._users.require_user(principal)
        file = await self._files.get_by_id(file_id)
        if file is None:
            raise ResourceNotFoundException("file", file_id)
        task = await self._tasks.get_by_id(file.task_id)
        if file.uploader_id != user.id and (task is None or task.owner_id != user.id):
            raise AuthorizationException("file", "delete")
        await self._files.delete_file(file_id)
        await self._tasks.increment_file_count(file.task_id, -1)

        async def remove_stored_object() -> None:
            if not await self.storage.delete(file.storage_ref):
                logger.warning("Stored object for file %s was already gone", file_id)

        # Bytes go only once the row removal is committed.
        self._files.after_commit(remove_stored_object)
        logger.info("File %s removed from task %s", file_id, file.task_id)

    async def list_files(self, principal: Principal | None, task_id: str) -> list[TaskFileResult]:
        """Attachments of a visible task; empty for unknown or hidden tasks."""
        task = await self._tasks.get_by_id(task_id)
        if task is None:
            return []
        viewer = await self._users.get_current_user(principal)
        if not is_visible_to(task, viewer.id if viewer else None):
            return []
        return await self._files.list_for_task(task_id)

    async def open_file(
        self, principal: Principal | None, file_id: str
    ) -> tuple[TaskFileResult, AsyncIterator[bytes]]:
        """Metadata and a byte stream for a visible attachment."""
        file = await self._files.get_by_id(file_id)
        if file is None:
            raise ResourceNotFoundException("file", file_id)
        task = await self._tasks.get_by_id(file.task_id)
        viewer = await self._users.get_current_user(principal)
        if task is None or not is_visible_to(task, viewer.id if viewer else None):
            raise ResourceNotFoundException("file", file_id)
        if not await self.storage.exists(file.storage_ref):
            logger.error("Stored object missing for file %s", file_id)
            raise ResourceNotFoundException("file", file_id)
        return file, self.storage.download(file.storage_ref)
