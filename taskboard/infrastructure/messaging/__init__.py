"""Change notifications for live queries (in-process feed, optional Redis relay)."""

from taskboard.infrastructure.messaging.change_feed import (
    ChangeBatch,
    ChangeEvent,
    ChangeFeed,
    ChangeSubscription,
    get_change_feed,
)

__all__ = [
    "ChangeBatch",
    "ChangeEvent",
    "ChangeFeed",
    "ChangeSubscription",
    "get_change_feed",
]
