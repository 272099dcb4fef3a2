"""Alembic env: migrates through the same async driver (asyncpg / aiosqlite) the app uses."""
import asyncio
from logging.config import fileConfig
import os

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

config = context.config
if config.config_file_name is not None:
    # keep the app's learning_dashboard.* loggers alive when run in-process
    fileConfig(config.config_file_name, disable_existing_loggers=False)

from learning_dashboard.db.base import Base  # noqa: E402
from learning_dashboard.core.config import get_settings  # noqa: E402

target_metadata = Base.metadata


def store_url() -> str:
    # ALEMBIC_DATABASE_URL, else STORE_URL with the service key, else alembic.ini
    override = os.getenv("ALEMBIC_DATABASE_URL")
    if override:
        return override

    settings = get_settings()
    if settings.has_credentials:
        return settings.store_url_with_key()

    return config.get_main_option("sqlalchemy.url")


def run_migrations_offline() -> None:
    """Emit SQL for review instead of touching the store."""
    context.configure(
        url=store_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        # SQLite cannot ALTER most constraints in place
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = store_url()

    engine = async_engine_from_config(configuration, prefix="sqlalchemy.", poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
