"""Database session configuration"""

import logging
from typing import AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from task_api import config
from task_api.db.base import Base

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def get_engine() -> AsyncEngine:
    """Get or create the async engine singleton"""
    global _engine

    if _engine is None:
        _engine = create_async_engine(
            config.get_database_url(),
            pool_pre_ping=True,  # Verify connections before using them
            pool_size=config.POOL_SIZE,
            max_overflow=config.MAX_OVERFLOW,
            pool_timeout=config.POOL_TIMEOUT,
            pool_recycle=config.POOL_RECYCLE,
            echo=False,  # Set to True to see SQL queries in logs
        )
        _register_pool_listeners(_engine)

    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory bound to the engine"""
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    return _session_factory


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine"""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _session_factory = None


async def init_db() -> None:
    """Create tables that do not exist yet"""
    # Import models so they are registered on the metadata
    from task_api.db import models  # noqa: F401

    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function for FastAPI routes.

    Usage:
        @router.get("/example")
        async def example(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with get_session_factory()() as session:
        try:
            yield session
        finally:
            await session.close()


def _register_pool_listeners(engine: AsyncEngine) -> None:
    # For async engines, we listen to the sync_engine
    @event.listens_for(engine.sync_engine, "connect")
    def on_connect(dbapi_conn, connection_record):
        logger.debug("New database connection created")

    @event.listens_for(engine.sync_engine, "invalidate")
    def on_invalidate(dbapi_conn, connection_record, exception):
        logger.warning(
            f"Database connection invalidated: {exception}",
            exc_info=exception
        )
