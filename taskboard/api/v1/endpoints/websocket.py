"""Live query WebSocket: /ws, plus /ws/status for connection counts.

The token is optional (?token=<jwt>); anonymous clients can subscribe to
queries over public data. A token that is present but invalid is rejected.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, WebSocket
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.api.v1.dependencies import get_safe_file_policy, get_session_factory
from taskboard.api.websocket import SubscriptionSession
from taskboard.application.dtos.file import SafeFilePolicy
from taskboard.application.dtos.user import Principal
from taskboard.core.config import get_settings
from taskboard.infrastructure.messaging.change_feed import get_change_feed
from taskboard.infrastructure.security.jwt import verify_token
from taskboard.schemas.websocket import WebSocketStatusResponse

router = APIRouter()


async def _reject_websocket(websocket: WebSocket, reason: str, code: int = 1008) -> None:
    """Accept then immediately close with code/reason so client gets a proper close frame."""
    await websocket.accept()
    await websocket.close(code=code, reason=reason)


@router.websocket("/ws")
async def live_queries(
    websocket: WebSocket,
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
    policy: Annotated[SafeFilePolicy, Depends(get_safe_file_policy)],
):
    """Serve subscribe/unsubscribe frames until the client disconnects."""
    principal: Principal | None = None
    token = websocket.query_params.get("token")
    if token:
        try:
            principal = verify_token(token)
        except ValueError:
            await _reject_websocket(websocket, "Invalid token")
            return
    manager = websocket.app.state.ws_manager
    session = SubscriptionSession(
        websocket,
        registry=websocket.app.state.live_queries,
        session_factory=session_factory,
        feed=get_change_feed(),
        principal=principal,
        policy=policy,
        max_page_size=get_settings().list_page_size_max,
    )
    await manager.connect(session)
    try:
        await session.serve()
    finally:
        await manager.disconnect(websocket)


@router.get("/ws/status", response_model=WebSocketStatusResponse)
async def websocket_status(request: Request) -> WebSocketStatusResponse:
    manager = request.app.state.ws_manager
    return WebSocketStatusResponse(
        total_connections=await manager.get_connection_count(),
        total_subscriptions=await manager.get_subscription_count(),
    )
