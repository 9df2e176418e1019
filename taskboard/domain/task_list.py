"""Task list filter/sort specification (value objects).

A TaskListSpec is what both the client state machine and the list query
engine agree on: selected statuses, selected owner categories, sort key and
direction. Selections are kept in canonical enum order so two specs with the
same members compare (and fingerprint) equal regardless of toggle order.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable
from dataclasses import dataclass, field

from taskboard.domain.enums import OwnerCategory, SortKey, SortOrder, TaskStatus


def canonical_statuses(values: Iterable[int | TaskStatus]) -> tuple[TaskStatus, ...]:
    """Deduplicate and order statuses as declared in TaskStatus."""
    wanted = {TaskStatus(v) for v in values}
    return tuple(s for s in TaskStatus if s in wanted)


def canonical_owners(values: Iterable[str | OwnerCategory]) -> tuple[OwnerCategory, ...]:
    """Deduplicate and order owner categories as declared in OwnerCategory."""
    wanted = {OwnerCategory(v) for v in values}
    return tuple(o for o in OwnerCategory if o in wanted)


@dataclass(frozen=True)
class TaskListSpec:
    """Filter and sort for the task list.

    An empty status_filter or owner_filter is valid and matches no tasks.
    """

    status_filter: tuple[TaskStatus, ...] = (TaskStatus.NEW, TaskStatus.IN_PROGRESS)
    owner_filter: tuple[OwnerCategory, ...] = tuple(OwnerCategory)
    sort_key: SortKey = SortKey.NUMBER
    sort_order: SortOrder = SortOrder.DESC

    def __post_init__(self) -> None:
        object.__setattr__(self, "status_filter", canonical_statuses(self.status_filter))
        object.__setattr__(self, "owner_filter", canonical_owners(self.owner_filter))
        object.__setattr__(self, "sort_key", SortKey(self.sort_key))
        object.__setattr__(self, "sort_order", SortOrder(self.sort_order))

    def fingerprint(self) -> str:
        """Short stable digest; cursors carry it so they cannot be reused across specs."""
        raw = json.dumps(
            [
                [s.value for s in self.status_filter],
                [o.value for o in self.owner_filter],
                self.sort_key.value,
                self.sort_order.value,
            ],
            separators=(",", ":"),
        )
        return hashlib.sha256(raw.encode()).hexdigest()[:16]


@dataclass(frozen=True)
class ListTasksQuery:
    """One page request against the list query engine."""

    spec: TaskListSpec = field(default_factory=TaskListSpec)
    num_items: int = 10
    cursor: str | None = None
