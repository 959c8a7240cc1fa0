"""
Notebox Backend — Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, FastAPI session dependency
       and the startup connectivity check.
How:   Database wraps one engine (and its connection pool) built from a
       Settings instance. create_app() stores it on app.state; the
       get_db_session dependency hands out one session per request and rolls
       back when the handler raises.
Who:   Route handlers (via Depends), the health check, the lifespan handler.

Connection Pooling:
    pool_size / max_overflow come from settings (PostgreSQL only).
    pool_pre_ping validates connections before use.
    pool_recycle=3600 recycles long-lived connections.
    SQLite (used by the test suite) keeps SQLAlchemy's default pool and gets
    PRAGMA foreign_keys=ON so ON DELETE CASCADE behaves like PostgreSQL.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from notebox.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object used by Alembic and by the test suite's
    create_all().
    """
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Owns the async engine and session factory for one application instance.

    Attributes:
        engine:           AsyncEngine with the configured connection pool
        session_factory:  async_sessionmaker producing AsyncSession objects
    """

    def __init__(self, settings: Settings):
        engine_kwargs = {
            "pool_pre_ping": settings.db_pool_pre_ping,
            "echo": settings.log_level == "DEBUG",
        }
        if not settings.is_sqlite:
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_recycle=3600,
            )

        self.engine: AsyncEngine = create_async_engine(settings.database_url, **engine_kwargs)

        if settings.is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        # expire_on_commit=False: ORM objects stay readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def ping(self) -> None:
        """Run SELECT 1; raises on any connectivity problem."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_all(self) -> None:
        """Create every table registered on Base.metadata (tests, local dev)."""
        # Import models so they register with Base.metadata
        from notebox.models import note, user  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close all pooled connections (application shutdown)."""
        await self.engine.dispose()


async def wait_for_database(
    database: Database,
    attempts: int = 5,
    max_wait: float = 10.0,
    initial_wait: float = 1.0,
    jitter: float = 1.0,
) -> None:
    """
    Block startup until the database answers SELECT 1.

    What:    Retries Database.ping() with exponential backoff and jitter.
    How:     tenacity AsyncRetrying; each failed attempt is logged at WARNING.
             After `attempts` failures the last error is re-raised.
    When:    Once, from the application lifespan.
    """
    async for attempt in AsyncRetrying(
        retry=retry_if_exception_type((OSError, TimeoutError, SQLAlchemyError)),
        stop=stop_after_attempt(attempts),
        wait=wait_exponential_jitter(initial=initial_wait, max=max_wait, jitter=jitter),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    ):
        with attempt:
            await database.ping()
    logger.info("Database connection verified")


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the application's Database
        2. Yields it to the route handler
        3. On success: commits anything the services left pending
        4. On error: rolls back and re-raises for the exception handlers
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/notes")
        async def list_notes(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.db
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
