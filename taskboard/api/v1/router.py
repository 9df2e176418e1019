"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from taskboard.api.v1.dependencies.
"""

from fastapi import APIRouter

from taskboard.api.v1.endpoints import comments, files, health, tasks, users
from taskboard.api.v1.endpoints import websocket as ws_endpoint

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(comments.router, prefix="/tasks", tags=["comments"])
api_router.include_router(files.router, tags=["files"])
api_router.include_router(ws_endpoint.router, tags=["websocket"])
