"""Async Session Factory — provides async DB sessions for direct usage outside FastAPI.

Invariants:
    - Meant for scripts, migrations, and test fixtures
    - Sessions never expire attributes on commit

Design Decisions:
    - Separate from infrastructure/database.py: no pooling options, no error mapping
      (ADR: alembic and test fixtures need a raw session factory)
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)


def create_session_factory(
    database_url: str | AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory for a database URL or an existing engine."""
    engine = (
        database_url if isinstance(database_url, AsyncEngine)
        else create_async_engine(database_url, echo=False)
    )
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
