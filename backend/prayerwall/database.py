"""
Prayer Wall Backend — Database Session Management
===================================================

What:  Async SQLAlchemy engine, session factory, and the per-operation session scope.
How:   The engine is created lazily on first use (not at import), then a
       session is handed out per unit of work that auto-commits on success
       and auto-rolls-back on error.
Who:   Used by PrayerService (one scope per request) and the health route.

Lazy engine:
    A missing or malformed DATABASE_URL must not stop the process from
    starting. The first request that needs the store triggers engine
    creation, and any failure there is raised as DatabaseError so the
    endpoint answers 500 with the underlying detail.

Managed Postgres URLs:
    Providers hand out URLs with libpq options such as ?sslmode=require and
    ?channel_binding=require. asyncpg rejects unknown keyword arguments, so
    sslmode is passed as its `ssl` connect argument and channel_binding is
    dropped before the engine is built.

Connection Pooling:
    pool_size / max_overflow bound the number of open connections. SQLite
    URLs (used in tests) keep SQLAlchemy's default pool for that dialect.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Tuple

from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from prayerwall.config import settings
from prayerwall.exceptions import DatabaseError


# ── Engine Configuration ──────────────────────────────────────────────────
_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker] = None

# libpq query options asyncpg.connect() does not accept
LIBPQ_ONLY_OPTIONS = ("sslmode", "channel_binding")


def asyncpg_connect_options(url: str) -> Tuple[URL, dict]:
    """
    Split libpq-only query options off an asyncpg URL.

    Returns the cleaned URL and the connect_args for create_async_engine.
    asyncpg takes the libpq sslmode names (require, verify-full, ...) as its
    `ssl` argument. channel_binding has no asyncpg counterpart. URLs for
    other drivers are returned as parsed, with no connect_args.
    """
    parsed = make_url(url)
    if parsed.drivername != "postgresql+asyncpg":
        return parsed, {}

    connect_args = {}
    sslmode = parsed.query.get("sslmode")
    if isinstance(sslmode, tuple):
        sslmode = sslmode[-1]
    if sslmode:
        connect_args["ssl"] = sslmode
    return parsed.difference_update_query(LIBPQ_ONLY_OPTIONS), connect_args


def get_engine() -> AsyncEngine:
    """
    What:    Returns the process-wide async engine, creating it on first call.
    Raises:  DatabaseError when DATABASE_URL is empty or cannot be parsed.
    """
    global _engine
    if _engine is None:
        url = settings.async_database_url
        if not url:
            raise DatabaseError(
                message="Database connection failed",
                details="DATABASE_URL is not configured",
            )

        engine_kwargs = {
            "pool_pre_ping": settings.db_pool_pre_ping,
            # Echo SQL queries in DEBUG mode for development visibility
            "echo": settings.log_level == "DEBUG",
        }
        if not url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_recycle=3600,
            )

        try:
            engine_url, connect_args = asyncpg_connect_options(url)
            if connect_args:
                engine_kwargs["connect_args"] = connect_args
            _engine = create_async_engine(engine_url, **engine_kwargs)
        except Exception as e:
            raise DatabaseError(message="Database connection failed", details=str(e))
    return _engine


def get_session_factory() -> async_sessionmaker:
    """Session factory bound to the lazily created engine."""
    global _session_factory
    if _session_factory is None:
        # expire_on_commit=False: returned rows stay readable after commit
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for migrations.
    """
    pass


# ── Session Scope ─────────────────────────────────────────────────────────
@asynccontextmanager
async def session_scope() -> AsyncGenerator[AsyncSession, None]:
    """
    Provides one database session for one unit of work.

    How it works:
        1. Creates a new session from the factory (engine created on first use)
        2. Yields it to the caller
        3. On success: commits the transaction
        4. On error: rolls back the transaction
        5. Always: closes the session (returns connection to pool)

    The service layer opens the scope itself, after input validation, so a
    rejected request never touches the store.

    Example usage:
        async with session_scope() as db:
            rows = (await db.execute(select(Prayer))).scalars().all()

    Raises:
        DatabaseError if the engine cannot be created. Other exceptions are
        propagated to the caller after rollback.
    """
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
           A no-op when no request ever created the engine.
    """
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
