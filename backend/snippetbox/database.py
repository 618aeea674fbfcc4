"""
SnippetBox — Database Engine & Session Management
===================================================

What:  Async SQLAlchemy engine, session factory, declarative base and
       schema bootstrap.
Why:   Centralizes all connection logic in one place.
How:   `create_engine()` builds a pooled async engine from Settings;
       `create_session_factory()` wraps it. Both are built once by
       `create_app()` and handed to the SnippetStore.
Who:   Used by the application factory, the store and the health route.

Connection Pooling Strategy:
    pool_size / max_overflow come from Settings (PostgreSQL only).
    pool_pre_ping validates connections before use.
    pool_recycle=3600 recycles connections every hour.
    SQLite (tests, local runs) keeps the dialect's default pool.
"""

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from snippetbox.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with a shared metadata
    object, which `create_schema()` uses to emit CREATE TABLE statements.
    """
    pass


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Build the async engine (and its connection pool) for the configured URL.

    The engine is safe to share between concurrent requests; each Store
    operation checks a connection out of the pool and returns it when done.
    """
    options = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        # Echo SQL queries in DEBUG mode for development visibility
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: attributes stay readable after the insert commits
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """
    What:  Creates any missing tables (CREATE TABLE IF NOT EXISTS).
    When:  During startup when `db_create_schema` is enabled, and in tests.
    """
    # Import models so they register with Base.metadata
    from snippetbox.models import snippet  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured")


async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
