"""
Database engine and session factory.

The engine is not created at import time: the application lifespan opens it
with ``create_engine`` and disposes it on shutdown, and request handlers get
sessions through ``app.api.dependencies.get_db_session``.
"""

from typing import Any, AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import settings

# Base class for all models
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(database_url: Optional[str] = None, **kwargs: Any) -> AsyncEngine:
    """
    Create an async engine for the given URL (defaults to the configured one).

    SQLite connections get foreign key enforcement switched on so that the
    ON DELETE actions of the schema behave as they do on PostgreSQL.
    """
    url = database_url or str(settings.DATABASE_URI)

    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=settings.DEBUG, **kwargs)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_async_engine(
        url,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        **kwargs,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Create the session factory bound to ``engine``.
    """
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
        class_=AsyncSession,
    )


async def session_scope(factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a session that is committed on success and rolled back on error.
    """
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
