"""
Application lifecycle event handlers.

The database engine and session factory are opened on startup, stored on
``app.state`` and disposed on shutdown.
"""

from typing import Callable, List

from fastapi import FastAPI
from loguru import logger
from sqlalchemy import text

from app.core.config import settings
from app.core.tracing import instrument_engine
from app.db import models  # noqa: F401  registers every table on the metadata
from app.db.session import Base, create_engine, create_session_factory


async def connect_to_db(app: FastAPI) -> None:
    """
    Open the database engine and verify the connection.
    """
    try:
        logger.info("Connecting to database...")

        engine = create_engine()
        instrument_engine(engine)
        session_factory = create_session_factory(engine)

        async with session_factory() as session:
            await session.execute(text("SELECT 1"))

        if settings.DB_CREATE_ALL:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database schema created")

        app.state.db_engine = engine
        app.state.session_factory = session_factory
        logger.info("Database connection established and verified")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        # Fail startup when the database is not reachable
        raise


async def close_db_connection(app: FastAPI) -> None:
    """
    Dispose the database engine.
    """
    engine = getattr(app.state, "db_engine", None)
    if engine is None:
        return

    try:
        logger.info("Closing database connections...")
        await engine.dispose()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error closing database connections: {e}")
    finally:
        app.state.db_engine = None
        app.state.session_factory = None


startup_event_handlers: List[Callable] = [
    connect_to_db,
]

shutdown_event_handlers: List[Callable] = [
    close_db_connection,
]
