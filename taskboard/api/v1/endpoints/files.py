"""Attachment API: saveFile, deleteFile, getSafeFiles, listing and download."""

from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import StreamingResponse

from taskboard.api.v1.dependencies import (
    CurrentPrincipal,
    get_file_query_service,
    get_file_service,
    get_safe_file_policy,
)
from taskboard.application.dtos.file import SafeFilePolicy
from taskboard.application.services import FileService
from taskboard.core.limiter import limit_upload, limit_writes
from taskboard.domain.exceptions import ValidationException
from taskboard.schemas.file import SafeFilesResponse, TaskFileResponse

router = APIRouter()


@router.get("/files/safe", response_model=SafeFilesResponse)
def get_safe_files(policy: Annotated[SafeFilePolicy, Depends(get_safe_file_policy)]):
    """Accepted upload types and size limit."""
    return SafeFilesResponse(mime_types=list(policy.mime_types), max_bytes=policy.max_bytes)


@router.post("/tasks/{task_id}/files", response_model=TaskFileResponse, status_code=201)
@limit_upload
async def save_file(
    request: Request,
    task_id: str,
    principal: CurrentPrincipal,
    file_svc: Annotated[FileService, Depends(get_file_service)],
    file: UploadFile = File(...),
):
    """Attach an uploaded file to a task owned by the caller."""
    if not file.filename:
        raise ValidationException("Filename required", field="file")
    created = await file_svc.save_file(
        principal,
        task_id,
        file_data=file.file,
        filename=file.filename,
        mime_type=file.content_type or "application/octet-stream",
    )
    return TaskFileResponse.model_validate(created)


@router.get("/tasks/{task_id}/files", response_model=list[TaskFileResponse])
async def list_files(
    task_id: str,
    principal: CurrentPrincipal,
    file_svc: Annotated[FileService, Depends(get_file_query_service)],
):
    files = await file_svc.list_files(principal, task_id)
    return [TaskFileResponse.model_validate(f) for f in files]


@router.get("/files/{file_id}/content")
async def download_file(
    file_id: str,
    principal: CurrentPrincipal,
    file_svc: Annotated[FileService, Depends(get_file_query_service)],
) -> StreamingResponse:
    """Stream the attachment bytes."""
    file, stream = await file_svc.open_file(principal, file_id)
    return StreamingResponse(
        stream,
        media_type=file.mime_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(file.filename)}",
            "Content-Length": str(file.file_size),
        },
    )


@router.delete("/files/{file_id}", status_code=204)
@limit_writes
async def delete_file(
    request: Request,
    file_id: str,
    principal: CurrentPrincipal,
    file_svc: Annotated[FileService, Depends(get_file_service)],
) -> None:
    """Remove an attachment (uploader or task owner)."""
    await file_svc.delete_file(principal, file_id)
