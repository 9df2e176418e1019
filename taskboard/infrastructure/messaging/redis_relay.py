"""Redis Pub/Sub relay for change notifications between workers.

Every worker has its own in-process ChangeFeed. When Redis is enabled, the
relay publishes locally committed batches to a shared channel and injects
batches committed by other workers into the local feed, so live queries on
any worker see every write.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import redis.asyncio as redis

from taskboard.core.config import get_settings
from taskboard.infrastructure.messaging.change_feed import ChangeBatch, ChangeEvent, ChangeFeed

logger = logging.getLogger(__name__)


def batch_to_message(batch: ChangeBatch) -> str:
    """Serialize a batch for publish."""
    return json.dumps(
        {
            "origin": batch.origin,
            "changes": sorted(
                ([c.table, c.record_id] for c in batch.changes),
                key=lambda pair: (pair[0], pair[1] or ""),
            ),
        }
    )


def message_to_batch(raw: str | bytes) -> ChangeBatch:
    """Deserialize a published batch. Raises ValueError on malformed payloads."""
    data: Any = json.loads(raw)
    if not isinstance(data, dict) or not isinstance(data.get("origin"), str):
        raise ValueError("change message missing origin")
    changes = frozenset(ChangeEvent(table=t, record_id=r) for t, r in data.get("changes", []))
    return ChangeBatch(origin=data["origin"], changes=changes)


class RedisChangeRelay:
    """Bridges a local ChangeFeed and a Redis channel. Start on app startup, stop on shutdown."""

    def __init__(self, feed: ChangeFeed, redis_client: redis.Redis | None = None) -> None:
        """Initialize. Pass redis_client for DI/testing."""
        self.feed = feed
        self.redis = redis_client
        self.settings = get_settings()
        self.channel = self.settings.redis_change_channel
        self._tasks: list[asyncio.Task[None]] = []

    async def connect(self) -> bool:
        """Establish Redis connection. Returns False (relay disabled) when unreachable."""
        if self.redis is None:
            self.redis = redis.Redis(
                host=self.settings.redis_host,
                port=self.settings.redis_port,
                db=self.settings.redis_db,
                password=(
                    self.settings.redis_password.get_secret_value()
                    if self.settings.redis_password
                    else None
                ),
                decode_responses=True,
                socket_connect_timeout=5,
            )
        try:
            await self.redis.ping()
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning("Redis change relay disabled, connection failed: %s", e)
            await self.redis.aclose()
            self.redis = None
            return False
        logger.info("Redis change relay connected (channel=%s)", self.channel)
        return True

    async def start(self) -> None:
        if not await self.connect():
            return
        self._tasks = [
            asyncio.create_task(self._forward_local()),
            asyncio.create_task(self._receive_remote()),
        ]

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("Redis change relay task failed before shutdown")
        self._tasks = []
        if self.redis is not None:
            try:
                await self.redis.aclose()
            except redis.RedisError:
                logger.warning("Redis change relay connection did not close cleanly")
            self.redis = None
            logger.info("Redis change relay disconnected")

    async def _forward_local(self) -> None:
        """Publish batches committed on this node."""
        async with self.feed.subscribe() as subscription:
            async for batch in subscription:
                if batch.origin != self.feed.node_id or self.redis is None:
                    continue
                try:
                    await self.redis.publish(self.channel, batch_to_message(batch))
                except redis.RedisError:
                    logger.exception("Failed to publish change batch")

    async def _receive_remote(self) -> None:
        """Inject batches committed on other nodes into the local feed."""
        if self.redis is None:
            return
        pubsub = self.redis.pubsub()
        try:
            await pubsub.subscribe(self.channel)
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    batch = message_to_batch(message["data"])
                except ValueError:
                    logger.warning("Ignoring malformed change message on %s", self.channel)
                    continue
                if batch.origin == self.feed.node_id:
                    continue
                self.feed.publish_nowait(batch.changes, origin=batch.origin)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Redis change relay stopped receiving on %s", self.channel)
        finally:
            await pubsub.unsubscribe(self.channel)
            await pubsub.aclose()
