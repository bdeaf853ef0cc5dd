"""Database Access — async engine, request-scoped sessions and SQLAlchemy error mapping.

Invariants:
    - A session that raises is rolled back before it is closed
    - SQLAlchemy exceptions leave this layer only as EmpirionError:
      IntegrityError → ValidationRejectedError, everything else → RepositoryUnavailableError
    - No retries: a failed round-trip goes straight back to the caller

Design Decisions:
    - Module-level db_manager set by init_db() from the FastAPI lifespan, so importing
      this module never opens connections
    - Pool sizing only for server databases; SQLite (tests, local runs) uses defaults
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from empirion.core.errors import (
    EmpirionError, RepositoryUnavailableError, ValidationRejectedError,
)

logger = logging.getLogger(__name__)

_UNAVAILABLE_REASONS: tuple[tuple[type[SQLAlchemyError], str], ...] = (
    (OperationalError, "database unreachable"),
    (DBAPIError, "database driver error"),
)


def map_db_error(e: SQLAlchemyError, operation: str) -> EmpirionError:
    """Translate a SQLAlchemy failure into the repository error taxonomy."""
    logger.error(f"{type(e).__name__} during {operation}: {e}")
    if isinstance(e, IntegrityError):
        return ValidationRejectedError("Record rejected by integrity constraint")
    for error_type, reason in _UNAVAILABLE_REASONS:
        if isinstance(e, error_type):
            return RepositoryUnavailableError(reason, operation)
    return RepositoryUnavailableError("database operation failed", operation)


class DatabaseSessionManager:
    """Owns the async engine and hands out sessions."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        options: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            options |= {
                "pool_size": pool_size,
                "max_overflow": max_overflow,
                "pool_recycle": 3600,
            }
        self.engine = create_async_engine(database_url, **options)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self._session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                raise map_db_error(e, "session") from e
            except Exception:
                await session.rollback()
                raise

    async def health_check(self) -> bool:
        """True when a trivial query round-trips."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except EmpirionError as e:
            logger.error(f"Database health check failed: {e.message}")
            return False
        return True


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    if db_manager is None:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
