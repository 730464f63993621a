"""Database Session Manager — async connection pool, transactions and the unit-of-work.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - All SQLAlchemy exceptions mapped to DatabaseError (core/errors.py), except a SQLite
      lock wait that outlasts lock_timeout, which becomes OperationTimeoutError
    - transaction() commits on normal exit, rolls back on any exception (cancellation included)
    - SQLite connections enforce foreign keys and open writes with BEGIN IMMEDIATE
    - SQLite busy timeout equals lock_timeout: a blocked BEGIN gives up within the
      operation deadline
    - Non-SQLite engines run at the configured isolation level (SERIALIZABLE by default)

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
    - expire_on_commit=False: rows stay readable after the unit-of-work commits
    - BEGIN IMMEDIATE on SQLite: concurrent joins on one roster serialize on the write lock
      instead of both reading "absent"
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Awaitable, Callable, TypeVar

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)

from rosterbot.core.errors import DatabaseError, OperationTimeoutError
from rosterbot.db.base import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        isolation_level: str = "SERIALIZABLE",
        lock_timeout: float = 5.0,
    ):
        self.lock_timeout = lock_timeout
        url = make_url(database_url)
        self.is_sqlite = url.get_backend_name() == "sqlite"
        if self.is_sqlite and url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        engine_kwargs: dict = {"pool_pre_ping": True}
        if self.is_sqlite:
            # the driver thread cannot be cancelled; bound the lock wait instead
            engine_kwargs["connect_args"] = {"timeout": lock_timeout}
            if ":memory:" not in database_url:
                engine_kwargs.update(pool_size=pool_size, max_overflow=max_overflow)
        else:
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
                isolation_level=isolation_level,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        if self.is_sqlite:
            _install_sqlite_hooks(self.engine.sync_engine)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            logger.error(f"DB integrity error: {e}")
            raise DatabaseError("Integrity constraint violated", "commit") from e
        except OperationalError as e:
            await session.rollback()
            if self.is_sqlite and "database is locked" in str(e.orig):
                logger.error(f"DB lock wait exceeded {self.lock_timeout}s")
                raise OperationTimeoutError("lock wait", self.lock_timeout) from e
            logger.error(f"DB operational error: {e}")
            raise DatabaseError("Connection or operational error", "execute") from e
        except DBAPIError as e:
            await session.rollback()
            logger.error(f"DB driver error: {e}")
            raise DatabaseError("Database driver error", "query") from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise DatabaseError("Database operation failed", "unknown") from e
        finally:
            await session.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """Session inside an open transaction; commit on exit, rollback on error."""
        async with self.session() as session:
            async with session.begin():
                yield session

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def create_schema(self) -> None:
        """Create all tables (development and tests; production uses alembic)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


class SqlAlchemyUnitOfWork:
    """UnitOfWork over DatabaseSessionManager: fn receives the transactional session."""

    def __init__(self, manager: DatabaseSessionManager):
        self._manager = manager

    async def run(self, fn: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async with self._manager.transaction() as tx:
            return await fn(tx)


def _install_sqlite_hooks(sync_engine) -> None:
    """Enable FK cascades and take the write lock at BEGIN."""

    @event.listens_for(sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # driver-level autocommit; transactions are started by the begin hook
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


def get_db_manager() -> DatabaseSessionManager:
    """FastAPI dependency for the process-wide session manager."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    return db_manager
