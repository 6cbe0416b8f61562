"""
Alembic Migration Environment
===============================

What:  Runs RentOK schema migrations through the same async engine settings
       the API uses (DATABASE_URL from rentok.config).
Who:   The `alembic` CLI (upgrade, downgrade, revision --autogenerate),
       invoked from the backend/ directory.

The marketplace database is shared with the storefront, so this project
records its revision in its own `rentok_alembic_version` table rather than
the default `alembic_version`. Offline mode renders SQL for review; online
mode applies it over asyncpg.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config
from alembic import context

from rentok.config import settings
from rentok.database import Base

# Registers every table on Base.metadata for --autogenerate
import rentok.models  # noqa: F401

VERSION_TABLE = "rentok_alembic_version"

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# DATABASE_URL wins over anything in alembic.ini
config.set_main_option("sqlalchemy.url", settings.database_url)


def _configure_options() -> dict:
    return {
        "target_metadata": target_metadata,
        "version_table": VERSION_TABLE,
        # Money columns are Numeric(10, 2); autogenerate must see precision changes
        "compare_type": True,
        "compare_server_default": True,
    }


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout without a database connection."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(connection=connection, **_configure_options())

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """
    Apply pending revisions over an async connection.

    Alembic's migration context is synchronous, so the work is handed to
    connection.run_sync() on a NullPool engine separate from the app pool.
    """
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
