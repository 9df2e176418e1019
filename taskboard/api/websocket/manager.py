"""Live query connections.

ConnectionManager holds every open connection (app.state.ws_manager, set in
lifespan). Each connection is served by a SubscriptionSession: it evaluates a
query when the client subscribes, re-evaluates it after every committed change
to a table the query reads, and pushes the value again only when it differs
from what the client last received.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.api.websocket.queries import LiveQuery, LiveQueryRegistry, QueryContext
from taskboard.application.dtos.file import SafeFilePolicy
from taskboard.application.dtos.user import Principal
from taskboard.domain.exceptions import TaskboardException
from taskboard.infrastructure.messaging.change_feed import ChangeBatch, ChangeFeed
from taskboard.schemas.websocket import (
    ErrorFrame,
    ResultFrame,
    SubscribeFrame,
    UnsubscribeFrame,
    client_frame_adapter,
)

logger = logging.getLogger(__name__)


def subscription_key(operation: str, args: dict[str, Any]) -> str:
    """(operation, args) as one string; equal for equal arguments in any key order."""
    return json.dumps([operation, args], sort_keys=True, separators=(",", ":"), default=str)


@dataclass
class _Subscription:
    id: str
    query: LiveQuery
    args: dict[str, Any]
    key: str
    last_sent: str | None = field(default=None)


class SubscriptionSession:
    """Live queries of one WebSocket connection."""

    def __init__(
        self,
        websocket: WebSocket,
        registry: LiveQueryRegistry,
        session_factory: async_sessionmaker[AsyncSession],
        feed: ChangeFeed,
        principal: Principal | None,
        policy: SafeFilePolicy,
        max_page_size: int = 100,
    ) -> None:
        self.websocket = websocket
        self.registry = registry
        self.session_factory = session_factory
        self.feed = feed
        self.principal = principal
        self.policy = policy
        self.max_page_size = max_page_size
        self._subscriptions: dict[str, _Subscription] = {}
        # Evaluations and sends are serialised so pushes for one id never reorder.
        self._lock = asyncio.Lock()

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    async def serve(self) -> None:
        """Read client frames and push updates until the client disconnects."""
        async with self.feed.subscribe() as changes:
            pump = asyncio.create_task(self._pump(changes))
            try:
                while True:
                    raw = await self.websocket.receive_text()
                    await self.handle_text(raw)
            except WebSocketDisconnect:
                logger.debug("Live query client disconnected (%d subscriptions)", self.subscription_count)
            finally:
                pump.cancel()
                try:
                    await pump
                except asyncio.CancelledError:
                    pass
                self._subscriptions.clear()

    async def _pump(self, changes: Any) -> None:
        """Apply every batch; a failed batch is logged and the next one still runs."""
        async for batch in changes:
            try:
                await self.apply_changes(batch)
            except Exception:
                logger.exception("Live query refresh failed for tables %s", sorted(batch.tables))

    async def handle_text(self, raw: str) -> None:
        try:
            frame = client_frame_adapter.validate_json(raw)
        except ValidationError as e:
            await self._send(ErrorFrame(error="BAD_FRAME", message=_first_error(e)))
            return
        if isinstance(frame, SubscribeFrame):
            await self.subscribe(frame)
        elif isinstance(frame, UnsubscribeFrame):
            await self.unsubscribe(frame.id)

    async def subscribe(self, frame: SubscribeFrame) -> None:
        """Register (or replace) subscription frame.id and push its current value."""
        query = self.registry.get(frame.operation)
        if query is None:
            await self._send(
                ErrorFrame(
                    id=frame.id,
                    error="UNKNOWN_OPERATION",
                    message=f"Unknown operation: {frame.operation}",
                )
            )
            return
        sub = _Subscription(
            id=frame.id,
            query=query,
            args=frame.args,
            key=subscription_key(frame.operation, frame.args),
        )
        async with self._lock:
            self._subscriptions[frame.id] = sub
            await self._evaluate_and_push([sub], force=True)
        logger.debug("Subscribed %s to %s", frame.id, frame.operation)

    async def unsubscribe(self, subscription_id: str) -> None:
        async with self._lock:
            self._subscriptions.pop(subscription_id, None)

    async def apply_changes(self, batch: ChangeBatch) -> None:
        """Re-run every subscription that reads a table touched by batch."""
        tables = batch.tables
        async with self._lock:
            affected = [s for s in self._subscriptions.values() if s.query.tables & tables]
            if affected:
                await self._evaluate_and_push(affected, force=False)

    async def _evaluate_and_push(self, subs: list[_Subscription], force: bool) -> None:
        """Evaluate each distinct (operation, args) once, then push changed values."""
        results: dict[str, tuple[Any, ErrorFrame | None]] = {}
        async with self.session_factory() as session:
            ctx = QueryContext(
                session=session,
                principal=self.principal,
                policy=self.policy,
                max_page_size=self.max_page_size,
            )
            for sub in subs:
                if sub.key not in results:
                    results[sub.key] = await self._run(sub, ctx)
        for sub in subs:
            value, error = results[sub.key]
            if error is not None:
                await self._send(error.model_copy(update={"id": sub.id}))
                sub.last_sent = None
                continue
            serialized = json.dumps(value, sort_keys=True, default=str)
            if not force and serialized == sub.last_sent:
                continue
            sub.last_sent = serialized
            await self._send(ResultFrame(id=sub.id, value=value))

    async def _run(self, sub: _Subscription, ctx: QueryContext) -> tuple[Any, ErrorFrame | None]:
        try:
            return await sub.query.run(ctx, sub.args), None
        except ValidationError as e:
            return None, ErrorFrame(id=sub.id, error="VALIDATION_ERROR", message=_first_error(e))
        except TaskboardException as e:
            return None, ErrorFrame(id=sub.id, error=e.error_code, message=e.message)
        except Exception:
            logger.exception("Live query %s failed", sub.query.name)
            return None, ErrorFrame(
                id=sub.id, error="INTERNAL_ERROR", message="Query failed; it will be retried on the next change"
            )

    async def _send(self, frame: ResultFrame | ErrorFrame) -> None:
        await self.websocket.send_json(frame.model_dump(mode="json"))


def _first_error(e: ValidationError) -> str:
    errors = e.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    return f"{loc}: {err.get('msg', '')}" if loc else str(err.get("msg", ""))


class ConnectionManager:
    """Open live query connections. Lock-protected for concurrent access."""

    def __init__(self) -> None:
        self._sessions: dict[WebSocket, SubscriptionSession] = {}
        self._lock = asyncio.Lock()

    async def connect(self, session: SubscriptionSession) -> None:
        """Accept the WebSocket and track its session."""
        await session.websocket.accept()
        async with self._lock:
            self._sessions[session.websocket] = session

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._sessions.pop(websocket, None)

    async def get_connection_count(self) -> int:
        async with self._lock:
            return len(self._sessions)

    async def get_subscription_count(self) -> int:
        async with self._lock:
            return sum(s.subscription_count for s in self._sessions.values())
