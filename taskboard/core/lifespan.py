"""Application lifespan: startup and shutdown.

Wiring only: WebSocket connection manager, live query registry, the optional
Redis change relay, and SQL engine dispose.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from taskboard.core.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: WebSocket manager, live query registry, Redis relay (if
    enabled). Shutdown order: relay stop, SQL engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    from taskboard.api.websocket import ConnectionManager, build_default_registry
    from taskboard.infrastructure.messaging.change_feed import get_change_feed

    app.state.ws_manager = ConnectionManager()
    app.state.live_queries = build_default_registry()

    app.state.change_relay = None
    if settings.redis_enabled:
        from taskboard.infrastructure.messaging.redis_relay import RedisChangeRelay

        relay = RedisChangeRelay(get_change_feed())
        await relay.start()
        app.state.change_relay = relay

    yield

    # ---- Shutdown ----
    from taskboard.infrastructure.persistence import database

    try:
        if app.state.change_relay is not None:
            await app.state.change_relay.stop()
            app.state.change_relay = None
    finally:
        if database.engine is not None:
            await database.engine.dispose()
            logger.info("Database engine disposed")
