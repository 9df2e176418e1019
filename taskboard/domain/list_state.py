"""Task list view state: filter, sort, selection and pagination as a pure reducer.

Clients hold a TaskListState and feed user interaction into reduce():

    state = TaskListState()
    state = reduce(state, ToggleStatus(TaskStatus.DONE))
    query = pending_request(state)   # issue it, tagged with state.generation
    state = reduce(state, PageLoaded(state.generation, page.items, page.cursor, page.is_done))

Every filter or sort change starts a new generation. Pages that arrive for an
older generation are dropped, so an in-flight "load more" for a previous
filter can never be merged into the new list.

Nothing here performs I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, TypeVar

from taskboard.domain.enums import LoadStatus, OwnerCategory, SortKey, SortOrder, TaskStatus
from taskboard.domain.task_list import ListTasksQuery, TaskListSpec

DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class TaskListState:
    """Immutable snapshot of the task list view."""

    spec: TaskListSpec = field(default_factory=TaskListSpec)
    selected_task: int | None = None
    page_size: int = DEFAULT_PAGE_SIZE
    generation: int = 0
    items: tuple[Any, ...] = ()
    cursor: str | None = None
    load_status: LoadStatus = LoadStatus.LOADING_FIRST_PAGE

    @property
    def is_loading(self) -> bool:
        return self.load_status in (LoadStatus.LOADING_FIRST_PAGE, LoadStatus.LOADING_MORE)


# Events


@dataclass(frozen=True)
class ToggleStatus:
    value: TaskStatus


@dataclass(frozen=True)
class ToggleOwner:
    value: OwnerCategory


@dataclass(frozen=True)
class ClickSortColumn:
    key: SortKey


@dataclass(frozen=True)
class ScrollProximityReached:
    """The end of the loaded list came into view."""


@dataclass(frozen=True)
class SelectTask:
    number: int | None


@dataclass(frozen=True)
class PageLoaded:
    """A page arrived for the request issued at `generation`."""

    generation: int
    items: tuple[Any, ...]
    continue_cursor: str | None
    is_done: bool


Event = (
    ToggleStatus
    | ToggleOwner
    | ClickSortColumn
    | ScrollProximityReached
    | SelectTask
    | PageLoaded
)


T = TypeVar("T")


def _toggle(selected: tuple[T, ...], value: T) -> list[T]:
    if value in selected:
        return [v for v in selected if v != value]
    return [*selected, value]


def _with_spec(state: TaskListState, spec: TaskListSpec) -> TaskListState:
    """Switch to a new filter/sort: new generation, list reloads from the first page."""
    if spec == state.spec:
        return state
    return replace(
        state,
        spec=spec,
        generation=state.generation + 1,
        items=(),
        cursor=None,
        load_status=LoadStatus.LOADING_FIRST_PAGE,
    )


def _sorted_by(spec: TaskListSpec, key: SortKey) -> TaskListSpec:
    if spec.sort_key == key:
        return replace(spec, sort_order=spec.sort_order.reversed())
    return replace(spec, sort_key=key, sort_order=SortOrder.ASC)


def _page_loaded(state: TaskListState, event: PageLoaded) -> TaskListState:
    if event.generation != state.generation or not state.is_loading:
        return state
    items = event.items if state.load_status is LoadStatus.LOADING_FIRST_PAGE else (
        state.items + tuple(event.items)
    )
    return replace(
        state,
        items=tuple(items),
        cursor=event.continue_cursor,
        load_status=LoadStatus.EXHAUSTED if event.is_done else LoadStatus.CAN_LOAD_MORE,
    )


def reduce(state: TaskListState, event: Event) -> TaskListState:
    """Return the state that follows `event`. Unknown events raise TypeError."""
    spec = state.spec
    if isinstance(event, ToggleStatus):
        statuses = _toggle(spec.status_filter, TaskStatus(event.value))
        return _with_spec(state, replace(spec, status_filter=tuple(statuses)))
    if isinstance(event, ToggleOwner):
        owners = _toggle(spec.owner_filter, OwnerCategory(event.value))
        return _with_spec(state, replace(spec, owner_filter=tuple(owners)))
    if isinstance(event, ClickSortColumn):
        return _with_spec(state, _sorted_by(spec, SortKey(event.key)))
    if isinstance(event, ScrollProximityReached):
        if state.load_status is LoadStatus.CAN_LOAD_MORE:
            return replace(state, load_status=LoadStatus.LOADING_MORE)
        return state
    if isinstance(event, SelectTask):
        return replace(state, selected_task=event.number)
    if isinstance(event, PageLoaded):
        return _page_loaded(state, event)
    raise TypeError(f"Unknown task list event: {type(event).__name__}")


def pending_request(state: TaskListState) -> ListTasksQuery | None:
    """Query the client should have in flight for this state, or None when idle."""
    if state.load_status is LoadStatus.LOADING_FIRST_PAGE:
        return ListTasksQuery(spec=state.spec, num_items=state.page_size)
    if state.load_status is LoadStatus.LOADING_MORE:
        return ListTasksQuery(spec=state.spec, num_items=state.page_size, cursor=state.cursor)
    return None
