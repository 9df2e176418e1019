"""Task API: createTask, updateTask, getTask, edit access and listTasks."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from taskboard.api.v1.dependencies import (
    CurrentPrincipal,
    get_task_query_service,
    get_task_service,
)
from taskboard.application.services import TaskQueryService, TaskService
from taskboard.core.limiter import limit_writes
from taskboard.schemas.task import (
    TaskCreatedResponse,
    TaskCreateRequest,
    TaskListQueryRequest,
    TaskLookupResponse,
    TaskPageResponse,
    TaskResponse,
    TaskUpdateRequest,
)

router = APIRouter()


@router.post("", response_model=TaskCreatedResponse, status_code=201)
@limit_writes
async def create_task(
    request: Request,
    body: TaskCreateRequest,
    principal: CurrentPrincipal,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
):
    """Create a task and assign the next task number."""
    created = await task_svc.create_task(principal, body.to_info())
    return TaskCreatedResponse(id=created.id, number=created.number)


@router.post("/query", response_model=TaskPageResponse)
async def list_tasks(
    body: TaskListQueryRequest,
    principal: CurrentPrincipal,
    query_svc: Annotated[TaskQueryService, Depends(get_task_query_service)],
):
    """One page of the filtered, sorted task list."""
    page = await query_svc.list_tasks(principal, body.to_query())
    return TaskPageResponse.model_validate(page)


@router.get("/number/{number}", response_model=TaskLookupResponse)
async def get_task(
    number: int,
    principal: CurrentPrincipal,
    query_svc: Annotated[TaskQueryService, Depends(get_task_query_service)],
):
    lookup = await query_svc.get_task(principal, number)
    return TaskLookupResponse.model_validate(lookup)


@router.get("/number/{number}/edit-access", response_model=TaskLookupResponse)
async def get_edit_access(
    number: int,
    principal: CurrentPrincipal,
    query_svc: Annotated[TaskQueryService, Depends(get_task_query_service)],
):
    """found when the caller owns the task, no_permission or not_found otherwise."""
    lookup = await query_svc.get_edit_access(principal, number)
    return TaskLookupResponse.model_validate(lookup)


@router.patch("/{task_id}", response_model=TaskResponse)
@limit_writes
async def update_task(
    request: Request,
    task_id: str,
    body: TaskUpdateRequest,
    principal: CurrentPrincipal,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
):
    """Partial update by the task's owner."""
    updated = await task_svc.update_task(principal, task_id, body.to_changes())
    return TaskResponse.model_validate(updated)
