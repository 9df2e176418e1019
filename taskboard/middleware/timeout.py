"""Request timeout middleware.

Cancels a request that runs longer than the configured timeout and answers
504. Attachment downloads stream for as long as the client reads, so paths
ending in one of `exempt_suffixes` are not timed.
"""

import asyncio
import logging
from typing import Callable

from taskboard.middleware._asgi import send_json_error

logger = logging.getLogger(__name__)


def TimeoutMiddleware(
    app: Callable, timeout_seconds: int, exempt_suffixes: tuple[str, ...] = ("/content",)
) -> Callable:
    """Cancel request after timeout_seconds (504 when no response has started). Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http" or scope.get("path", "").endswith(exempt_suffixes):
            await app(scope, receive, send)
            return
        started = False

        async def send_wrapper(message: dict) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await asyncio.wait_for(app(scope, receive, send_wrapper), timeout=float(timeout_seconds))
        except TimeoutError:
            logger.warning(
                "Request timed out after %s seconds: %s %s",
                timeout_seconds,
                scope.get("method", ""),
                scope.get("path", ""),
            )
            if started:
                return
            await send_json_error(
                send,
                504,
                "GATEWAY_TIMEOUT",
                f"Request timed out after {timeout_seconds} seconds",
                {"timeout_seconds": timeout_seconds},
            )

    return asgi_app
