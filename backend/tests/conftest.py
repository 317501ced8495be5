"""
Prayer Wall Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:       AsyncMock standing in for AsyncSession
    ├── mock_session_factory:  session scope yielding mock_db_session
    ├── sqlite_engine:         in-memory aiosqlite engine with the schema created
    ├── sqlite_session_scope:  session scope bound to sqlite_engine
    ├── prayer_service:        PrayerService backed by sqlite
    ├── test_client:           HTTPX AsyncClient talking to the app (sqlite store)
    └── bare_client:           HTTPX AsyncClient with no store override
"""

import os
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

# Override settings for testing BEFORE any application imports
os.environ["DATABASE_URL"] = ""
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["TIMESTAMP_POLICY"] = "absolute"
os.environ["DISPLAY_TIMEZONE"] = "UTC"
os.environ.pop("LIST_LIMIT", None)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from prayerwall.database import Base
from prayerwall.models.prayer import Prayer
from prayerwall.services.prayer_service import PrayerService, get_prayer_service


# ══════════════════════════════════════════════════════════════════════════
# Mocked store
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalars.return_value.all.return_value = [...]
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def mock_session_factory(mock_db_session):
    """Session scope that yields mock_db_session; `.calls` counts openings."""

    @asynccontextmanager
    async def factory():
        factory.calls += 1
        yield mock_db_session

    factory.calls = 0
    return factory


# ══════════════════════════════════════════════════════════════════════════
# SQLite store
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def sqlite_engine():
    """
    In-memory SQLite engine with the prayers table created.

    StaticPool keeps the single in-memory database alive across sessions.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def sqlite_session_scope(sqlite_engine):
    """Same contract as prayerwall.database.session_scope, bound to SQLite."""
    factory = async_sessionmaker(sqlite_engine, class_=AsyncSession, expire_on_commit=False)

    @asynccontextmanager
    async def scope():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return scope


@pytest.fixture
def prayer_service(sqlite_session_scope):
    return PrayerService(session_factory=sqlite_session_scope)


@pytest.fixture
def seed_prayers(sqlite_session_scope):
    """
    Inserts prayers with explicit timestamps.

    Usage:
        ids = await seed_prayers([("text", "name", minutes_ago), ...])
    """

    async def seed(rows):
        now = datetime.now(timezone.utc)
        prayers = [
            Prayer(text=text, name=name, timestamp=now - timedelta(minutes=minutes_ago))
            for text, name, minutes_ago in rows
        ]
        async with sqlite_session_scope() as db:
            db.add_all(prayers)
            await db.flush()
            return [str(prayer.id) for prayer in prayers]

    return seed


# ══════════════════════════════════════════════════════════════════════════
# HTTP clients
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(prayer_service):
    """
    HTTPX AsyncClient routed straight into the FastAPI app, with the
    prayer service bound to the in-memory SQLite store.
    """
    from prayerwall.main import app

    app.dependency_overrides[get_prayer_service] = lambda: prayer_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def bare_client():
    """Client for the app as deployed with no DATABASE_URL configured."""
    from prayerwall.main import app

    app.dependency_overrides.clear()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
