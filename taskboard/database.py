"""
Database connection and session management.
Uses SQLAlchemy 2.0 async pattern.

Each service owns an isolated store (users, boards, tasks) with its own
engine and session factory. Nothing joins across stores.
"""

from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from taskboard.config import get_settings
from taskboard.errors import Internal

settings = get_settings()


def _create_engine(url: str) -> AsyncEngine:
    """Build an engine with options suited to the database type."""
    timeout = settings.db_command_timeout_seconds

    if url.startswith("sqlite"):
        # SQLite with NullPool: every session gets its own connection, avoiding
        # "cannot commit transaction - SQL statements in progress" from StaticPool.
        engine = create_async_engine(
            url,
            echo=settings.debug,
            connect_args={"check_same_thread": False, "timeout": timeout},
            poolclass=NullPool,
        )

        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_conn, connection_record):
            """Enable WAL mode + foreign keys on every new SQLite connection."""
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute(f"PRAGMA busy_timeout={int(timeout * 1000)}")
            cursor.close()

        return engine

    # PostgreSQL settings with connection pooling
    return create_async_engine(
        url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        connect_args={"command_timeout": timeout},
    )


def _create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


user_engine = _create_engine(settings.user_database_url)
board_engine = _create_engine(settings.board_database_url)
task_engine = _create_engine(settings.task_database_url)

# Session factories
user_session_maker = _create_session_maker(user_engine)
board_session_maker = _create_session_maker(board_engine)
task_session_maker = _create_session_maker(task_engine)


def _session_dependency(session_maker: async_sessionmaker[AsyncSession]):
    """Build a FastAPI dependency that yields sessions for one store."""

    # Anything not committed by the time the session closes is rolled back,
    # including work interrupted by a cancelled request.
    async def dependency() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    return dependency


async def commit_or_raise(session: AsyncSession, message: str) -> None:
    """Commit the session's transaction; on failure roll back and raise Internal."""
    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        raise Internal(message) from e


get_user_db = _session_dependency(user_session_maker)
get_board_db = _session_dependency(board_session_maker)
get_task_db = _session_dependency(task_session_maker)


async def init_db() -> None:
    """Create the tables of every store."""
    # Import models so every table is registered on its metadata
    from taskboard.kernel.models import BoardStoreBase, TaskStoreBase, UserStoreBase

    for engine, base in (
        (user_engine, UserStoreBase),
        (board_engine, BoardStoreBase),
        (task_engine, TaskStoreBase),
    ):
        async with engine.begin() as conn:
            await conn.run_sync(base.metadata.create_all)


async def drop_db() -> None:
    """Drop the tables of every store. Used by tests."""
    from taskboard.kernel.models import BoardStoreBase, TaskStoreBase, UserStoreBase

    for engine, base in (
        (user_engine, UserStoreBase),
        (board_engine, BoardStoreBase),
        (task_engine, TaskStoreBase),
    ):
        async with engine.begin() as conn:
            await conn.run_sync(base.metadata.drop_all)


async def close_db() -> None:
    """Close database connections."""
    for engine in (user_engine, board_engine, task_engine):
        await engine.dispose()
