"""Domain enumerations for Taskboard.

Enums represent fixed sets of domain values (task status, visibility,
owner categories and task list sort options).
"""

from enum import Enum, IntEnum


class TaskStatus(IntEnum):
    """Task workflow status. Integer values are persisted and sent over the wire."""

    NEW = 1
    IN_PROGRESS = 2
    DONE = 3

    @property
    def label(self) -> str:
        """Human-readable name (e.g. 'In Progress')."""
        return _STATUS_LABELS[self]

    @classmethod
    def values(cls) -> list[int]:
        """Return all valid status values in display order."""
        return [status.value for status in cls]


_STATUS_LABELS = {
    TaskStatus.NEW: "New",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.DONE: "Done",
}


class Visibility(str, Enum):
    """Who can see a task. Private tasks are only visible to their owner."""

    PUBLIC = "public"
    PRIVATE = "private"


class OwnerCategory(str, Enum):
    """Task ownership relative to the viewer, used for list filtering."""

    ME = "me"
    OTHERS = "others"
    NOBODY = "nobody"

    @classmethod
    def values(cls) -> list[str]:
        return [category.value for category in cls]


class SortKey(str, Enum):
    """Columns the task list can be ordered by."""

    NUMBER = "number"
    TITLE = "title"
    STATUS = "status"
    OWNER = "owner"
    COMMENT_COUNT = "comment_count"


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"

    def reversed(self) -> "SortOrder":
        return SortOrder.DESC if self is SortOrder.ASC else SortOrder.ASC


class LoadStatus(str, Enum):
    """Pagination status of a task list.

    CAN_LOAD_MORE and EXHAUSTED come back from the server with each page;
    LOADING_FIRST_PAGE and LOADING_MORE only exist in client state.
    """

    LOADING_FIRST_PAGE = "LoadingFirstPage"
    CAN_LOAD_MORE = "CanLoadMore"
    LOADING_MORE = "LoadingMore"
    EXHAUSTED = "Exhausted"


class LookupState(str, Enum):
    """Outcome of fetching a single task for display or editing."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    NO_PERMISSION = "no_permission"
