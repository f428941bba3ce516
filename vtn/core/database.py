"""
Database Configuration and Session Management
Async engine and session factory for the SQL storage backend
"""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy import event, text
import structlog

from vtn.core.config import DATABASE_CONFIG

logger = structlog.get_logger()

# Create declarative base
Base = declarative_base()


def normalize_database_url(database_url: str) -> str:
    """Select the async driver for plain PostgreSQL URLs"""
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


def create_engine(database_url: str, **overrides: Any) -> AsyncEngine:
    """
    Create the async engine for a database URL

    Pool sizing from ``DATABASE_CONFIG`` only applies to PostgreSQL; other
    dialects get the driver defaults unless overridden.
    """
    database_url = normalize_database_url(database_url)

    if "postgresql" in database_url:
        engine_kwargs = {
            **DATABASE_CONFIG,
            "connect_args": {
                "server_settings": {
                    "application_name": "openadr-vtn",
                }
            },
        }
    else:
        engine_kwargs = {"echo": DATABASE_CONFIG["echo"]}
    engine_kwargs.update(overrides)

    engine = create_async_engine(database_url, **engine_kwargs)

    @event.listens_for(engine.sync_engine, "checkout")
    def receive_checkout(dbapi_connection, connection_record, connection_proxy):
        """Log connection checkout for monitoring"""
        logger.debug("Database connection checked out", connection_id=id(dbapi_connection))

    @event.listens_for(engine.sync_engine, "checkin")
    def receive_checkin(dbapi_connection, connection_record):
        """Log connection checkin for monitoring"""
        logger.debug("Database connection checked in", connection_id=id(dbapi_connection))

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,  # Manual flush control
    )


async def check_database_health(engine: AsyncEngine) -> bool:
    """
    Check database connectivity
    Used by the health check endpoint
    """
    try:
        async with engine.begin() as conn:
            result = await conn.execute(text("SELECT 1"))
            return result.scalar() == 1
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        return False


async def init_database(engine: AsyncEngine) -> None:
    """
    Create tables
    Called during application startup
    """
    try:
        async with engine.begin() as conn:
            # Import all models to ensure they're registered
            from vtn.models import credential, entities  # noqa: F401

            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Database initialization failed", error=str(e))
        raise


async def close_database(engine: Optional[AsyncEngine]) -> None:
    """
    Close database connections
    Called during application shutdown
    """
    if engine is None:
        return
    try:
        await engine.dispose()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error("Error closing database connections", error=str(e))
