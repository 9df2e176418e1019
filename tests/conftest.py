"""Pytest configuration and fixtures for taskboard.

Required settings are set before the app is imported. Every test gets a
fresh in-memory SQLite database (StaticPool keeps the single connection
alive) with all tables created; the app's session dependencies and storage
are overridden to use it.
"""

import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production-0123456789"
os.environ["REDIS_ENABLED"] = "false"
os.environ.setdefault("STORAGE_ROOT", tempfile.mkdtemp(prefix="taskboard-test-"))

from collections.abc import AsyncIterator, Callable  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from taskboard.api.v1.dependencies import get_session_factory, get_storage_service  # noqa: E402
from taskboard.core.config import get_settings  # noqa: E402
from taskboard.core.limiter import limiter  # noqa: E402
from taskboard.infrastructure.external.storage import LocalStorageService  # noqa: E402
from taskboard.infrastructure.persistence import models  # noqa: E402,F401
from taskboard.infrastructure.persistence.database import (  # noqa: E402
    Base,
    get_db,
    get_db_transactional,
    make_sessionmaker,
    run_after_commit,
)
from taskboard.infrastructure.security.jwt import create_identity_token  # noqa: E402

get_settings.cache_clear()


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Fresh in-memory database with every table (and the task sequence row)."""
    eng = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return make_sessionmaker(engine)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Session for repository tests; the test commits or rolls back itself."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage(tmp_path) -> LocalStorageService:
    return LocalStorageService(storage_root=str(tmp_path / "storage"))


@pytest.fixture
async def app(
    session_factory: async_sessionmaker[AsyncSession], storage: LocalStorageService
) -> AsyncIterator[FastAPI]:
    """App wired to the test database, with lifespan started and rate limits off."""
    from taskboard.main import create_app

    application = create_app()

    async def _get_db() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    async def _get_db_transactional() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            async with session.begin():
                yield session
            await run_after_commit(session)

    application.dependency_overrides[get_db] = _get_db
    application.dependency_overrides[get_db_transactional] = _get_db_transactional
    application.dependency_overrides[get_session_factory] = lambda: session_factory
    application.dependency_overrides[get_storage_service] = lambda: storage
    limiter.enabled = False
    async with application.router.lifespan_context(application):
        yield application
    limiter.enabled = True


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    """Build bearer headers for an identity-provider subject."""

    def _headers(subject: str = "alice", name: str = "Alice", picture: str | None = None) -> dict[str, str]:
        token = create_identity_token(subject, name, picture)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
async def signed_in(client: AsyncClient, auth_headers) -> Callable[..., dict]:
    """Save a user through the API and return its headers plus user record."""

    async def _sign_in(subject: str = "alice", name: str = "Alice") -> dict:
        headers = auth_headers(subject, name)
        response = await client.post("/api/v1/users/me", headers=headers)
        assert response.status_code == 200, response.text
        return {"headers": headers, "user": response.json()}

    return _sign_in
