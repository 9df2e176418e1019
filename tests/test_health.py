"""Smoke tests for health and app wiring."""

from httpx import AsyncClient


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json().get("status") == "ok"


async def test_readiness_runs_query(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_root_returns_html(client: AsyncClient) -> None:
    """GET / returns HTML landing page."""
    response = await client.get("/")
    assert response.status_code == 200
    assert "text/html" in response.headers.get("content-type", "")
    assert "/api/v1/ws" in response.text


async def test_request_id_is_generated_and_forwarded(client: AsyncClient) -> None:
    generated = await client.get("/api/v1/health")
    assert generated.headers.get("x-request-id")

    forwarded = await client.get("/api/v1/health", headers={"X-Request-ID": "abc-123"})
    assert forwarded.headers["x-request-id"] == "abc-123"

    unsafe = await client.get("/api/v1/health", headers={"X-Request-ID": "bad id with spaces"})
    assert unsafe.headers["x-request-id"] != "bad id with spaces"


async def test_security_headers_present(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health")
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"


async def test_oversized_json_body_rejected(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/tasks/query",
        content=b"{" + b" " * (2 * 1024 * 1024) + b"}",
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 413
    assert response.json()["error"] == "PAYLOAD_TOO_LARGE"


async def test_websocket_status_counts(client: AsyncClient) -> None:
    response = await client.get("/api/v1/ws/status")
    assert response.status_code == 200
    assert response.json() == {"total_connections": 0, "total_subscriptions": 0}
