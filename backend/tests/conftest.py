"""
Notely Backend — Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:   Mock AsyncSession for service unit tests
    ├── database:          Real Database on a throwaway SQLite file
    ├── client:            HTTPX AsyncClient against the full-mode app
    └── degraded_client:   HTTPX AsyncClient against the health-only app
"""

import os

# create_app() and main() read settings from the environment; keep them off
# any real database and quiet.
os.environ.pop("DATABASE_URL", None)
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from notely.database import Database  # noqa: E402


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_list(mock_db_session):
            mock_db_session.execute.return_value.scalars.return_value.all.return_value = []
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def database(tmp_path):
    """
    A Database backed by a fresh SQLite file with all tables created.
    """
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'notely.db'}")
    await db.create_tables()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def client(database):
    """
    HTTPX AsyncClient wired to a full-mode app (database present).

    Usage:
        async def test_health(client):
            response = await client.get("/v1/healthz")
            assert response.status_code == 200
    """
    from notely.main import create_app

    app = create_app(database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def degraded_client():
    """HTTPX AsyncClient wired to a degraded-mode app (no database)."""
    from notely.main import create_app

    app = create_app(database=None)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
