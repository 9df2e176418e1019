"""CommentService and FileService unit tests with mocked ports."""

import hashlib
import io
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from taskboard.application.dtos.comment import CommentResult
from taskboard.application.dtos.file import SafeFilePolicy, TaskFileResult
from taskboard.application.dtos.task import TaskResult
from taskboard.application.dtos.user import Principal, UserResult
from taskboard.application.services.comment_service import CommentService
from taskboard.application.services.file_service import FileService, _sanitize_filename
from taskboard.domain.enums import TaskStatus, Visibility
from taskboard.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)

NOW = datetime(2026, 1, 1, tzinfo=UTC)
PRINCIPAL = Principal(subject="idp|alice", name="Alice")
ALICE = UserResult(id="u1", token_identifier="idp|alice", name="Alice", picture_url=None)
POLICY = SafeFilePolicy(mime_types=("text/plain", "image/png"), max_bytes=16)


def _task(**overrides) -> TaskResult:
    values = dict(
        id="t1", number=1, title="T", description="", status=TaskStatus.NEW,
        visibility=Visibility.PUBLIC, owner_id="u1", owner_name="Alice",
        comment_count=0, file_count=0, created_at=NOW, updated_at=NOW,
    )
    values.update(overrides)
    return TaskResult(**values)


@pytest.fixture
def users():
    service = AsyncMock()
    service.require_user = AsyncMock(return_value=ALICE)
    service.get_current_user = AsyncMock(return_value=ALICE)
    return service


async def test_save_comment_bumps_count(users) -> None:
    comments = AsyncMock()
    comments.add_comment = AsyncMock(
        return_value=CommentResult("c1", "t1", "Looks good", "u1", "Alice", None, NOW)
    )
    tasks = AsyncMock()
    tasks.get_by_id = AsyncMock(return_value=_task(owner_id="u2"))
    result = await CommentService(comments, tasks, users).save_comment(PRINCIPAL, "t1", "  Looks good ")
    assert result.id == "c1"
    comments.add_comment.assert_awaited_once_with("t1", "u1", "Looks good")
    tasks.increment_comment_count.assert_awaited_once_with("t1", 1)


async def test_blank_comment_rejected(users) -> None:
    comments, tasks = AsyncMock(), AsyncMock()
    with pytest.raises(ValidationException):
        await CommentService(comments, tasks, users).save_comment(PRINCIPAL, "t1", " \n ")
    comments.add_comment.assert_not_called()
    tasks.increment_comment_count.assert_not_called()


async def test_comment_on_missing_task_rejected(users) -> None:
    tasks = AsyncMock()
    tasks.get_by_id = AsyncMock(return_value=None)
    with pytest.raises(ResourceNotFoundException):
        await CommentService(AsyncMock(), tasks, users).save_comment(PRINCIPAL, "nope", "hi")


async def test_list_comments_of_hidden_task_is_empty(users) -> None:
    comments = AsyncMock()
    tasks = AsyncMock()
    tasks.get_by_id = AsyncMock(return_value=_task(owner_id="u2", visibility=Visibility.PRIVATE))
    assert await CommentService(comments, tasks, users).list_comments(PRINCIPAL, "t1") == []
    comments.list_for_task.assert_not_called()


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("notes.txt", "notes.txt"),
        ("../../etc/passwd", "passwd"),
        ("C:\\Users\\a\\report.png", "report.png"),
        (" .hidden. ", "hidden"),
    ],
)
def test_sanitize_filename(raw: str, expected: str) -> None:
    assert _sanitize_filename(raw) == expected


@pytest.mark.parametrize("raw", ["", "...", "CON", "lpt1.txt", "dir/"])
def test_sanitize_filename_rejects(raw: str) -> None:
    with pytest.raises(ValueError):
        _sanitize_filename(raw)


def _file_service(users, task: TaskResult | None = None):
    storage = AsyncMock()
    files = AsyncMock()
    files.after_commit = MagicMock()
    files.create_file = AsyncMock(
        side_effect=lambda data: TaskFileResult(
            data.id, data.task_id, data.uploader_id, data.filename, data.mime_type,
            data.file_size, data.checksum, data.storage_ref, NOW,
        )
    )
    tasks = AsyncMock()
    tasks.get_by_id = AsyncMock(return_value=task or _task())
    return FileService(storage, files, tasks, users, POLICY), storage, files, tasks


async def test_save_file_stores_and_counts(users) -> None:
    service, storage, files, tasks = _file_service(users)
    payload = b"hello"
    result = await service.save_file(PRINCIPAL, "t1", io.BytesIO(payload), "hi.txt", "text/plain; charset=utf-8")
    assert result.file_size == 5
    assert result.checksum == hashlib.sha256(payload).hexdigest()
    assert result.storage_ref == f"tasks/t1/files/{result.id}/hi.txt"
    storage.upload.assert_awaited_once()
    tasks.increment_file_count.assert_awaited_once_with("t1", 1)


async def test_save_file_rejects_type_and_size(users) -> None:
    service, storage, _, _ = _file_service(users)
    with pytest.raises(ValidationException):
        await service.save_file(PRINCIPAL, "t1", io.BytesIO(b"x"), "a.exe", "application/x-msdownload")
    with pytest.raises(ValidationException):
        await service.save_file(PRINCIPAL, "t1", io.BytesIO(b"x" * 17), "big.txt", "text/plain")
    storage.upload.assert_not_called()


async def test_save_file_on_someone_elses_task_rejected(users) -> None:
    service, storage, _, _ = _file_service(users, _task(owner_id="u2"))
    with pytest.raises(AuthorizationException):
        await service.save_file(PRINCIPAL, "t1", io.BytesIO(b"x"), "a.txt", "text/plain")
    storage.upload.assert_not_called()


async def test_delete_file_by_uploader(users) -> None:
    service, storage, files, tasks = _file_service(users, _task(owner_id="u2"))
    files.get_by_id = AsyncMock(
        return_value=TaskFileResult("f1", "t1", "u1", "a.txt", "text/plain", 1, "c", "tasks/t1/files/f1/a.txt", NOW)
    )
    storage.delete = AsyncMock(return_value=False)
    await service.delete_file(PRINCIPAL, "f1")
    files.delete_file.assert_awaited_once_with("f1")
    tasks.increment_file_count.assert_awaited_once_with("t1", -1)
    storage.delete.assert_not_awaited()

    remove_stored_object = files.after_commit.call_args.args[0]
    await remove_stored_object()
    storage.delete.assert_awaited_once_with("tasks/t1/files/f1/a.txt")


async def test_delete_file_by_stranger_rejected(users) -> None:
    service, _, files, tasks = _file_service(users, _task(owner_id="u2"))
    files.get_by_id = AsyncMock(
        return_value=TaskFileResult("f1", "t1", "u3", "a.txt", "text/plain", 1, "c", "ref", NOW)
    )
    with pytest.raises(AuthorizationException):
        await service.delete_file(PRINCIPAL, "f1")
    files.delete_file.assert_not_called()
