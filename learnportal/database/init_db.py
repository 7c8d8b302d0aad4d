"""
Database initialization and connection management.

This module provides functions for:
1. Creating the async engine and session factory
2. Creating or dropping the schema from the table models
3. Disposing of the engine on shutdown
"""

from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from learnportal.common.logger import app_logger
from learnportal.database.base import Base
# Registers every table on Base.metadata
from learnportal.database import models  # noqa: F401

# Setup module logger
logger = app_logger.getChild("database.init_db")

# Global engine and session factory
_engine: Optional[AsyncEngine] = None
_session_factory: Optional[sessionmaker] = None


def get_engine_kwargs(
    database_url: str,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_timeout: int = 30,
) -> Dict[str, Any]:
    """
    Get engine keyword arguments based on database type.

    SQLite drivers pick their own pool, so pool sizing is only passed to
    server databases.
    """
    kwargs: Dict[str, Any] = {"echo": echo}

    if not database_url.startswith("sqlite"):
        kwargs.update({
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_timeout": pool_timeout,
            "pool_pre_ping": True,
        })

    return kwargs


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    """Build an AsyncSession factory bound to engine."""
    return sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


def get_engine() -> AsyncEngine:
    """Get the global async engine instance."""
    if _engine is None:
        raise RuntimeError("Database engine not initialized. Call initialize_database() first.")
    return _engine


def get_session_factory() -> sessionmaker:
    """Get the global session factory."""
    if _session_factory is None:
        raise RuntimeError("Database engine not initialized. Call initialize_database() first.")
    return _session_factory


async def initialize_database(
    database_url: str,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_timeout: int = 30,
) -> AsyncEngine:
    """
    Initialize the async database engine.

    Args:
        database_url: Database connection URL
        echo: Whether to echo SQL statements
        pool_size: Connection pool size
        max_overflow: Maximum number of connections to allow above pool_size
        pool_timeout: Timeout for getting a connection from the pool

    Returns:
        AsyncEngine instance
    """
    global _engine, _session_factory

    try:
        logger.info(f"Initializing database with URL: {database_url[:10]}... and pool size: {pool_size}")

        _engine = create_async_engine(
            database_url,
            **get_engine_kwargs(database_url, echo, pool_size, max_overflow, pool_timeout)
        )
        _session_factory = create_session_factory(_engine)

        # Test connection
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

        logger.info("Database engine initialized successfully")
        return _engine

    except Exception as e:
        logger.error(f"Failed to initialize async database: {str(e)}")
        raise


async def create_schema(engine: Optional[AsyncEngine] = None) -> None:
    """
    Create every table that does not exist yet.

    Production deployments run the alembic migration instead; this is for
    development databases and tests.
    """
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema created")


async def drop_schema(engine: Optional[AsyncEngine] = None) -> None:
    """Drop every table known to the models."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info("Database schema dropped")


async def close_database() -> None:
    """Close the database engine and all connections."""
    global _engine, _session_factory

    if _engine:
        try:
            await _engine.dispose()
            logger.info("Database engine closed successfully")
        except Exception as e:
            logger.error(f"Error closing database engine: {str(e)}")
            raise
        finally:
            _engine = None
            _session_factory = None
