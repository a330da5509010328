"""Alembic environment for the GridBase tables.

The URL comes from ``GRIDBASE_DATABASE_URL`` unless alembic.ini sets one.
SQLite migrations are rendered in batch mode because SQLite cannot alter
columns in place.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

from gridbase.core.config import get_settings
from gridbase.infrastructure.persistence import models  # noqa: F401
from gridbase.infrastructure.persistence.database import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", get_settings().database_url)

DATABASE_URL = config.get_main_option("sqlalchemy.url")
BATCH_MODE = bool(DATABASE_URL and DATABASE_URL.startswith("sqlite"))


def _configure(**options) -> None:
    context.configure(target_metadata=Base.metadata, render_as_batch=BATCH_MODE, **options)


def emit_sql() -> None:
    """Write the migration SQL to stdout without connecting."""
    _configure(url=DATABASE_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def migrate() -> None:
    """Apply migrations over a single async connection."""
    engine = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    emit_sql()
else:
    asyncio.run(migrate())
