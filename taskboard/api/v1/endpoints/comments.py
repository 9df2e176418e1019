"""Comment API: saveComment and listComments."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from taskboard.api.v1.dependencies import (
    CurrentPrincipal,
    get_comment_query_service,
    get_comment_service,
)
from taskboard.application.services import CommentService
from taskboard.core.limiter import limit_writes
from taskboard.schemas.comment import CommentCreateRequest, CommentResponse

router = APIRouter()


@router.get("/{task_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    task_id: str,
    principal: CurrentPrincipal,
    comment_svc: Annotated[CommentService, Depends(get_comment_query_service)],
):
    comments = await comment_svc.list_comments(principal, task_id)
    return [CommentResponse.model_validate(c) for c in comments]


@router.post("/{task_id}/comments", response_model=CommentResponse, status_code=201)
@limit_writes
async def save_comment(
    request: Request,
    task_id: str,
    body: CommentCreateRequest,
    principal: CurrentPrincipal,
    comment_svc: Annotated[CommentService, Depends(get_comment_service)],
):
    """Append a comment and bump the task's comment count in one transaction."""
    comment = await comment_svc.save_comment(principal, task_id, body.body)
    return CommentResponse.model_validate(comment)
