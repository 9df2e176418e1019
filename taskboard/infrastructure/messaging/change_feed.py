"""In-process change feed: committed row changes fanned out to live query subscribers.

Each committed transaction is published as one batch of ChangeEvent so a
subscriber re-runs its query at most once per commit. Subscriber queues are
bounded; when a slow consumer falls behind, its oldest batch is dropped (the
next batch still triggers a re-run, so no update is lost for table-level
invalidation).
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator, Iterable
from dataclasses import dataclass
from functools import lru_cache

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 256


@dataclass(frozen=True)
class ChangeEvent:
    """A row (record_id) or a whole table (record_id None) changed."""

    table: str
    record_id: str | None = None


@dataclass(frozen=True)
class ChangeBatch:
    """Changes of one commit. origin is the node that committed them."""

    origin: str
    changes: frozenset[ChangeEvent]

    @property
    def tables(self) -> frozenset[str]:
        return frozenset(c.table for c in self.changes)


class ChangeSubscription:
    """Async iterator over batches for one consumer. Close (or use `async with`) when done."""

    def __init__(self, feed: ChangeFeed, queue: asyncio.Queue[ChangeBatch]) -> None:
        self._feed = feed
        self._queue = queue

    async def get(self) -> ChangeBatch:
        return await self._queue.get()

    def close(self) -> None:
        self._feed._unsubscribe(self._queue)

    def __aiter__(self) -> AsyncIterator[ChangeBatch]:
        return self

    async def __anext__(self) -> ChangeBatch:
        return await self._queue.get()

    async def __aenter__(self) -> ChangeSubscription:
        return self

    async def __aexit__(self, *exc: object) -> None:
        self.close()


class ChangeFeed:
    """Publish/subscribe hub for committed changes within one process."""

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self.node_id = uuid.uuid4().hex
        self._queue_size = queue_size
        self._subscribers: set[asyncio.Queue[ChangeBatch]] = set()

    def subscribe(self) -> ChangeSubscription:
        queue: asyncio.Queue[ChangeBatch] = asyncio.Queue(maxsize=self._queue_size)
        self._subscribers.add(queue)
        logger.debug("Change feed subscriber added (total=%d)", len(self._subscribers))
        return ChangeSubscription(self, queue)

    def _unsubscribe(self, queue: asyncio.Queue[ChangeBatch]) -> None:
        self._subscribers.discard(queue)
        logger.debug("Change feed subscriber removed (total=%d)", len(self._subscribers))

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish_nowait(
        self, changes: Iterable[ChangeEvent], origin: str | None = None
    ) -> ChangeBatch | None:
        """Fan out one batch without awaiting. Safe to call from SQLAlchemy session events."""
        frozen = frozenset(changes)
        if not frozen:
            return None
        batch = ChangeBatch(origin=origin or self.node_id, changes=frozen)
        for queue in list(self._subscribers):
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(batch)
        return batch


@lru_cache
def get_change_feed() -> ChangeFeed:
    """Process-wide change feed (one per worker)."""
    return ChangeFeed()
