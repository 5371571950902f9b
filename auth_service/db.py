"""Database engine construction, startup connection retries, and cleanup."""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import text
import asyncio
from .config import settings
from .errors import DatabaseUnavailable
from .logger import logger

# Base class for ORM models
Base = declarative_base()

# ==================== Connection Pool Setup ====================


def create_db_engine(dsn: str) -> AsyncEngine:
    """Create the pooled async engine for the given PostgreSQL DSN.

    No connection is opened here; see ``wait_for_db``.
    """
    engine = create_async_engine(
        dsn,
        echo=False,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,  # Verify connections before use
        connect_args={"timeout": settings.DB_CONNECT_TIMEOUT},
    )
    logger.info(
        f"Database engine configured: pool_size={settings.DB_POOL_SIZE}, "
        f"max_overflow={settings.DB_MAX_OVERFLOW}, timeout={settings.DB_POOL_TIMEOUT}s"
    )
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


# ==================== Startup Resilience ====================


async def wait_for_db(
    engine: AsyncEngine,
    max_attempts: int = settings.DB_CONNECT_MAX_ATTEMPTS,
    backoff: float = settings.DB_CONNECT_BACKOFF,
) -> None:
    """Block until the database answers ``SELECT 1``, retrying with a fixed back-off.

    Args:
        engine: Engine to probe
        max_attempts: Number of connection attempts before giving up
        backoff: Seconds to sleep between attempts

    Raises:
        DatabaseUnavailable: if every attempt failed
    """
    for attempt in range(1, max_attempts + 1):
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            logger.warning(
                f"Database is unavailable (attempt {attempt}/{max_attempts}): {str(e)}"
            )
            if attempt == max_attempts:
                logger.error(f"Giving up on database after {max_attempts} attempts")
                raise DatabaseUnavailable(
                    f"database unreachable after {max_attempts} attempts"
                ) from e
            logger.info(f"Backing off for {backoff} seconds...")
            await asyncio.sleep(backoff)
        else:
            logger.info("Connected to database")
            return

# ==================== Cleanup ====================

async def dispose_engine(engine: AsyncEngine) -> None:
    """Gracefully close all pooled connections during shutdown."""
    logger.info("Disposing database engine and closing connections")
    try:
        await engine.dispose()
        logger.info("Database connections closed successfully")
    except SQLAlchemyError as e:
        logger.error(f"Error disposing database engine: {str(e)}", exc_info=True)
