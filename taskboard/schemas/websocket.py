"""Live query WebSocket frames and status."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter


class SubscribeFrame(BaseModel):
    """Client: start a live query under a client-chosen id."""

    type: Literal["subscribe"]
    id: str = Field(..., min_length=1, max_length=128)
    operation: str
    args: dict[str, Any] = Field(default_factory=dict)


class UnsubscribeFrame(BaseModel):
    """Client: stop the live query with this id."""

    type: Literal["unsubscribe"]
    id: str


ClientFrame = Annotated[SubscribeFrame | UnsubscribeFrame, Field(discriminator="type")]
client_frame_adapter: TypeAdapter[SubscribeFrame | UnsubscribeFrame] = TypeAdapter(ClientFrame)


class ResultFrame(BaseModel):
    """Server: current value of a live query."""

    type: Literal["result"] = "result"
    id: str
    value: Any


class ErrorFrame(BaseModel):
    """Server: a subscription (or an unreadable frame, id null) failed."""

    type: Literal["error"] = "error"
    id: str | None = None
    error: str
    message: str


class WebSocketStatusResponse(BaseModel):
    """Response for GET /ws/status."""

    total_connections: int = Field(..., description="Number of open live query connections")
    total_subscriptions: int = Field(..., description="Live queries across all connections")
