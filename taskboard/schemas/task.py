"""Task API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from taskboard.application.dtos.task import UNSET, NewTaskInfo, TaskChanges
from taskboard.domain.enums import LookupState, OwnerCategory, SortKey, SortOrder, TaskStatus, Visibility
from taskboard.domain.task_list import ListTasksQuery, TaskListSpec


class TaskCreateRequest(BaseModel):
    """Request body for createTask. owner_id may only name the caller."""

    title: str = Field(..., min_length=1, max_length=500)
    description: str = ""
    status: TaskStatus = TaskStatus.NEW
    visibility: Visibility = Visibility.PUBLIC
    owner_id: str | None = None

    def to_info(self) -> NewTaskInfo:
        return NewTaskInfo(
            title=self.title,
            description=self.description,
            status=self.status,
            visibility=self.visibility,
            owner_id=self.owner_id,
        )


class TaskUpdateRequest(BaseModel):
    """Partial update. Omitted fields are kept; "owner_id": null unassigns the task."""

    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    status: TaskStatus | None = None
    visibility: Visibility | None = None
    owner_id: str | None = None

    def to_changes(self) -> TaskChanges:
        sent = self.model_fields_set
        values: dict[str, Any] = {}
        for name in ("title", "description", "status", "visibility"):
            value = getattr(self, name)
            values[name] = value if name in sent and value is not None else UNSET
        values["owner_id"] = self.owner_id if "owner_id" in sent else UNSET
        return TaskChanges(**values)


class TaskCreatedResponse(BaseModel):
    """createTask result: the opaque id and the assigned number."""

    id: str
    number: int


class TaskResponse(BaseModel):
    """Task read model."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    number: int
    title: str
    description: str
    status: TaskStatus
    visibility: Visibility
    owner_id: str | None = None
    owner_name: str | None = None
    comment_count: int
    file_count: int
    created_at: datetime
    updated_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status_label(self) -> str:
        return self.status.label


class TaskLookupResponse(BaseModel):
    """getTask / edit access: data state, plus the task when found."""

    model_config = ConfigDict(from_attributes=True)

    state: LookupState
    task: TaskResponse | None = None


class TaskListQueryRequest(BaseModel):
    """listTasks request. Defaults match the initial list view."""

    status_filter: list[TaskStatus] = Field(
        default_factory=lambda: [TaskStatus.NEW, TaskStatus.IN_PROGRESS]
    )
    owner_filter: list[OwnerCategory] = Field(default_factory=lambda: list(OwnerCategory))
    sort_key: SortKey = SortKey.NUMBER
    sort_order: SortOrder = SortOrder.DESC
    num_items: int = 10
    cursor: str | None = None

    def to_query(self) -> ListTasksQuery:
        return ListTasksQuery(
            spec=TaskListSpec(
                status_filter=tuple(self.status_filter),
                owner_filter=tuple(self.owner_filter),
                sort_key=self.sort_key,
                sort_order=self.sort_order,
            ),
            num_items=self.num_items,
            cursor=self.cursor,
        )


class TaskPageResponse(BaseModel):
    """One page of listTasks."""

    model_config = ConfigDict(from_attributes=True)

    page: list[TaskResponse]
    continue_cursor: str | None = None
    is_done: bool
    status: str
