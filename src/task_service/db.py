# src/task_service/db.py
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import DateTime, TypeDecorator

from task_service.config import Environment, settings
from task_service.logging_config import logger


def engine_options(database_url: str) -> Dict[str, Any]:
    """
    Build create_async_engine keyword arguments for the given URL.
    SQLite (local runs and tests) takes no pool sizing or server options.
    """
    options: Dict[str, Any] = {
        # Log SQL statements in DEBUG mode only.
        "echo": settings.LOGGING_LEVEL.upper() == "DEBUG",
    }
    if database_url.startswith("sqlite"):
        return options

    statement_timeout = (
        ""
        if settings.ENVIRONMENT == Environment.TESTING
        else f" -c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}"
    )
    options.update(
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=30,
        pool_recycle=1800,
        # Checks each connection with 'SELECT 1' on checkout and replaces dead ones.
        pool_pre_ping=True,
        # Passed directly to the psycopg v3 driver
        connect_args={
            "application_name": "task_service",
            "options": "-c timezone=UTC" + statement_timeout,
        },
    )
    return options


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL, **engine_options(settings.DATABASE_URL)
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)

# All SQLAlchemy models inherit from this Base.
Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamp column.
    Backends that drop the offset (SQLite) hand back naive values; those are
    re-tagged as UTC on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a transactional, auto-closing database session.
    Any database error during the request rolls the transaction back.
    """
    session = AsyncSessionLocal()
    try:
        yield session
        await session.commit()
    except SQLAlchemyError as e:
        logger.error(f"Database transaction failed: {e}", exc_info=True)
        await session.rollback()
        raise
    finally:
        await session.close()
