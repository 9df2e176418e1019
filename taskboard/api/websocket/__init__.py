"""Live query subscriptions over WebSocket."""

from taskboard.api.websocket.manager import ConnectionManager, SubscriptionSession
from taskboard.api.websocket.queries import LiveQuery, LiveQueryRegistry, build_default_registry

__all__ = [
    "ConnectionManager",
    "LiveQuery",
    "LiveQueryRegistry",
    "SubscriptionSession",
    "build_default_registry",
]
