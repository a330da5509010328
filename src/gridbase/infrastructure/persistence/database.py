"""Async SQLAlchemy engine and sessions for GridBase.

Both SQLite (``sqlite+aiosqlite``) and PostgreSQL (``postgresql+asyncpg``)
URLs are supported. The engine is created lazily on first use and shared by
the whole process through ``get_db_manager``.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator

from sqlalchemy import event, make_url, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from gridbase.core.config import Settings, get_settings
from gridbase.core.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base for the GridBase tables."""

    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # Entry rows cascade with their schema only when SQLite enforces foreign keys
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Owns the async engine and the session factory."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.settings.database_url.startswith("sqlite")

    def sqlite_path(self) -> Path | None:
        """File backing a SQLite URL, or None for in-memory and non-SQLite URLs."""
        if not self.is_sqlite:
            return None
        database = make_url(self.settings.database_url).database
        if not database or database == ":memory:":
            return None
        return Path(database)

    def _engine_options(self) -> dict[str, Any]:
        if self.is_sqlite:
            return {"connect_args": {"check_same_thread": False}}
        return {
            "pool_size": self.settings.db_pool_size,
            "max_overflow": self.settings.db_max_overflow,
            "pool_timeout": self.settings.db_pool_timeout,
            "pool_recycle": self.settings.db_pool_recycle,
            "pool_pre_ping": True,
        }

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_async_engine(
                self.settings.database_url,
                echo=self.settings.db_echo,
                **self._engine_options(),
            )
            if self.is_sqlite:
                event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
            logger.info(
                "Database engine created",
                database_url=self._engine.url.render_as_string(hide_password=True),
            )
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_factory

    async def create_tables(self) -> None:
        """Create missing tables from the model metadata (development and tests)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured", tables=sorted(Base.metadata.tables))

    async def disconnect(self) -> None:
        """Dispose the engine; the next use creates a fresh one."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database engine disposed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session scope that rolls back on error.

        Callers commit explicitly; nothing is committed on exit.

        Example:
            async with db.session() as session:
                model = await SchemaRepository(session).get_by_id(schema_id)
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def check_connection(self) -> bool:
        """Run ``SELECT 1``; False when the database cannot be reached."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("Database connection check failed", error=str(e))
            return False
        return True


_db_manager: DatabaseManager | None = None


def get_db_manager() -> DatabaseManager:
    """Process-wide ``DatabaseManager``."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with get_db_manager().session() as session:
        yield session


async def init_database() -> None:
    """Prepare the database at startup.

    Creates the SQLite file's directory when needed and verifies the
    connection. Tables are created automatically only in development and
    testing; production deployments run ``alembic upgrade head``.

    Raises:
        RuntimeError: If the database cannot be reached.
    """
    # Registers the models on Base.metadata
    from gridbase.infrastructure.persistence import models  # noqa: F401

    db = get_db_manager()

    sqlite_path = db.sqlite_path()
    if sqlite_path is not None and not sqlite_path.parent.exists():
        sqlite_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("SQLite directory created", path=str(sqlite_path.parent))

    if not await db.check_connection():
        raise RuntimeError("Failed to connect to database")

    if db.settings.is_production:
        logger.info("Skipping table creation in production; run migrations instead")
    else:
        await db.create_tables()


async def close_database() -> None:
    """Dispose the shared engine on shutdown."""
    await get_db_manager().disconnect()
