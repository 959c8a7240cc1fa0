"""
Alembic Migration Environment
===============================

What:  Runs Notebox migrations against the async SQLAlchemy engine.
How:   Builds its own notebox.config.Settings (there is no module-level
       settings object) and takes DATABASE_URL from it, not from alembic.ini.
       Both tables are registered for --autogenerate: `users` (credential
       store) and `notes` (FK to users.id, ON DELETE CASCADE).
Who:   The `alembic` CLI (upgrade, downgrade, revision), run from backend/.

Notebox-specific choices:
    - compare_type=True: column type changes (e.g. VARCHAR → TEXT for
      usernames) show up in autogenerated revisions.
    - render_as_batch on SQLite: local databases cannot ALTER columns in
      place, so Alembic rebuilds the table instead.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config

from notebox.config import Settings
from notebox.database import Base

# Both models must be imported to register with Base.metadata; notes
# references users, so autogenerate needs the pair.
from notebox.models.note import Note  # noqa: F401
from notebox.models.user import User  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

settings = Settings()
config.set_main_option("sqlalchemy.url", settings.database_url)


def _configure_kwargs() -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": settings.is_sqlite,
    }


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting (alembic upgrade --sql)."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs(),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(connection=connection, **_configure_kwargs())

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Connect with an unpooled async engine and apply pending migrations."""
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
