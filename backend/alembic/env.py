"""Alembic environment — async migrations for the business_plans and companies tables.

Invariants:
    - Target metadata is empirion.db.base.Base with every model module imported
    - The URL comes from Settings.database_url, so the asyncpg rewrite of
      postgresql:// lives in one place (config.py)

Design Decisions:
    - alembic.ini sqlalchemy.url is only the docker-compose default; an explicit
      DATABASE_URL always wins
    - NullPool: the migration process opens one connection and exits
"""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

import empirion.models  # noqa: F401  (populates Base.metadata)
from empirion.config import get_settings
from empirion.db.base import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _migration_url() -> str:
    if os.environ.get("DATABASE_URL"):
        return get_settings().database_url
    return config.get_main_option("sqlalchemy.url")


def _run(connection: Connection | None = None) -> None:
    if connection is None:
        context.configure(
            url=_migration_url(),
            target_metadata=Base.metadata,
            literal_binds=True,
            dialect_opts={"paramstyle": "named"},
        )
    else:
        context.configure(
            connection=connection,
            target_metadata=Base.metadata,
            compare_type=True,
        )
    with context.begin_transaction():
        context.run_migrations()


async def _run_online() -> None:
    engine = create_async_engine(_migration_url(), poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    _run()
else:
    asyncio.run(_run_online())
