import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy import event

from epg_browser.models import Base

logger = logging.getLogger(__name__)


def _create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create async session factory from engine"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


def _configure_sqlite(dbapi_conn, _) -> None:
    """Configure SQLite connection parameters"""
    cursor = dbapi_conn.cursor()
    # WAL lets readers keep a consistent snapshot while a refresh replaces the channel set
    cursor.execute("PRAGMA journal_mode = WAL")
    cursor.execute("PRAGMA cache_size = -64000")
    cursor.execute("PRAGMA busy_timeout = 30000")
    cursor.close()
    # Let SQLAlchemy emit BEGIN itself so reads inside a session share one snapshot
    dbapi_conn.isolation_level = None


def _begin_transaction(conn) -> None:
    conn.exec_driver_sql("BEGIN")


class Database:
    """
    Owns the async engine and session factory for one application instance.

    Created during application startup and handed to request handlers through
    FastAPI dependencies, so every app (and every test) gets its own handle.
    """

    def __init__(self, database_path: str):
        self.database_path = database_path
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call init() during startup.")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get the session factory (initialized in init)"""
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call init() during startup.")
        return self._session_factory

    async def init(self) -> None:
        """Initialize database schema and engine"""
        logger.info(f"Initializing database at {self.database_path}")

        self._engine = create_async_engine(
            f"sqlite+aiosqlite:///{self.database_path}",
            echo=False,
            pool_pre_ping=True,
            connect_args={"timeout": 30, "check_same_thread": False},
        )
        event.listen(self._engine.sync_engine, "connect", _configure_sqlite)
        event.listen(self._engine.sync_engine, "begin", _begin_transaction)

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self._session_factory = _create_session_factory(self._engine)

        logger.info("Database initialized successfully")

    async def close(self) -> None:
        """Close database connections on shutdown"""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database connections closed")

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a plain session (read paths)"""
        async with self.session_factory() as session:
            yield session

    @asynccontextmanager
    async def session_scope(self) -> AsyncIterator[AsyncSession]:
        """Provide a session wrapped in one transaction that commits on success and rolls back on error"""
        async with self.session_factory() as session:
            async with session.begin():
                yield session
