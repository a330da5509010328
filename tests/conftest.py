"""Shared fixtures: settings, an in-memory database and an HTTP client."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from gridbase.core.config import Settings
from gridbase.infrastructure.persistence import models  # noqa: F401
from gridbase.infrastructure.persistence.database import Base

TEST_USER_ID = "user-1"
MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def settings() -> Settings:
    """Settings for service tests: UTC dates and default bounds."""
    return Settings(environment="testing", default_timezone="UTC")


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """A session on a fresh in-memory SQLite database.

    ``StaticPool`` keeps one connection so every session sees the same tables.
    """
    engine = create_async_engine(MEMORY_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    sessions = async_sessionmaker(engine, expire_on_commit=False)
    try:
        async with sessions() as session:
            yield session
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the app, bound to the test session."""
    from gridbase.infrastructure.api.app import app
    from gridbase.infrastructure.persistence.database import get_db_session

    app.dependency_overrides[get_db_session] = lambda: db_session
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Caller identity header as set by the upstream auth layer."""
    return {"X-User-ID": TEST_USER_ID}
