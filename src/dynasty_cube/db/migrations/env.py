"""Alembic environment.

Learn: the target database comes from the app's settings
(DYNASTY_CUBE_DATABASE_URL), not from alembic.ini, so `alembic upgrade`
and the running service always agree. `alembic -x db_url=...` points a
single run somewhere else, e.g. a scratch SQLite file:

    alembic -x db_url=sqlite+aiosqlite:///scratch.db upgrade head

Online runs go through an async engine, so the app's drivers (asyncpg,
aiosqlite) are the only ones needed.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import create_async_engine

from dynasty_cube.config import settings
from dynasty_cube.db.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get(
        "db_url", settings.database_url
    )


def _options(url: str) -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        # SQLite can't ALTER constraints in place; autogenerate batch ops there
        "render_as_batch": make_url(url).get_backend_name() == "sqlite",
    }


def run_migrations_offline(url: str) -> None:
    """Emit SQL to stdout without connecting."""
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection, url: str) -> None:
    context.configure(connection=connection, **_options(url))
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online(url: str) -> None:
    # One-shot process: no pool to keep warm
    connectable = create_async_engine(url, poolclass=pool.NullPool)
    try:
        async with connectable.connect() as connection:
            await connection.run_sync(_migrate, url)
    finally:
        await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline(database_url())
else:
    asyncio.run(run_migrations_online(database_url()))
