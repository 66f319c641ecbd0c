"""
Database handle for TaskHub.

A single `Database` is built once per process (in `create_app`), kept on
`app.state.database` and torn down on shutdown. Request handlers receive an
`AsyncSession` through the `get_db` dependency; the authorization core and
services only ever see the session they are handed.
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite leaves FK enforcement (and ON DELETE actions) off per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the async engine and the session factory built on it."""

    def __init__(self, url: str | None = None, *, engine: AsyncEngine | None = None, **engine_kwargs) -> None:
        if engine is None:
            if url is None:
                raise ValueError("Either url or engine must be provided.")
            engine = create_async_engine(url, **engine_kwargs)
        if engine.dialect.name == "sqlite":
            event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings) -> "Database":
        """Build the handle with pool sizing that depends on the environment."""
        url = settings.database_url
        if url.startswith("sqlite"):
            return cls(url, echo=settings.debug)
        if settings.environment == "production":
            return cls(url, pool_size=20, max_overflow=50, pool_timeout=60, pool_recycle=1800)
        return cls(url, echo=settings.debug, pool_size=10, max_overflow=20, pool_timeout=30)

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """Return True if a trivial query succeeds."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed.")


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    database: Database = request.app.state.database
    async with database.session_factory() as db:
        try:
            yield db
        except Exception as e:
            logger.error(f"Database session error: {e}")
            await db.rollback()
            raise
