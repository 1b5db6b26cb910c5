"""Alembic environment for the quota schema."""

import asyncio
import logging
import os
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context
from jurybox.infrastructure.persistence.database import Base, DatabaseConfig
from jurybox.infrastructure.persistence.models import quota_models  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata


def get_database_config() -> DatabaseConfig:
    """Database settings from the environment, else from alembic.ini."""
    if os.getenv("JURYBOX_DATABASE_URL") or os.getenv("DATABASE_URL"):
        logger.info("Using database URL from environment")
        return DatabaseConfig.from_env()

    config_url = config.get_main_option("sqlalchemy.url")
    if config_url:
        logger.info("Using database URL from alembic.ini")
        return DatabaseConfig(database_url=config_url)

    logger.info("Using default SQLite database")
    return DatabaseConfig()


def is_async_url(url: str) -> bool:
    return "+aiosqlite" in url or "+asyncpg" in url


def run_migrations_offline() -> None:
    """Emit the migration SQL without connecting."""
    context.configure(
        url=get_database_config().sync_database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations(url: str) -> None:
    """Run migrations through the async driver the service itself uses."""
    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = url

    connectable = async_engine_from_config(
        configuration, prefix="sqlalchemy.", poolclass=pool.NullPool
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    url = get_database_config().database_url

    if is_async_url(url):
        asyncio.run(run_async_migrations(url))
        return

    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = url
    connectable = engine_from_config(configuration, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        do_run_migrations(connection)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
