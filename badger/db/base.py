# badger/db/base.py

from __future__ import annotations

import contextlib
import logging
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    async_sessionmaker,
    AsyncSession,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from badger.config import settings

log = logging.getLogger(__name__)


# --- Declarative Base ---
class Base(DeclarativeBase):
    pass


# --- Engine & Session factory ---
if settings.ENVIRONMENT == "test":
    log.info("Using in-memory SQLite database (aiosqlite) for tests.")
    # One shared connection, otherwise every checkout sees an empty database.
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    # pysqlite/aiosqlite defer BEGIN on their own, which breaks SAVEPOINT;
    # take over transaction start so begin_nested() behaves like on Postgres.
    @event.listens_for(engine.sync_engine, "connect")
    def _sqlite_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _sqlite_begin(conn):
        conn.exec_driver_sql("BEGIN")
else:
    log.info("Using ASYNC PostgreSQL database: %.25s...", settings.DATABASE_URL)
    if not settings.DATABASE_URL.startswith("postgresql+asyncpg://"):
        log.warning("DATABASE_URL does not start with 'postgresql+asyncpg://'.")
        raise ValueError("DATABASE_URL must use 'asyncpg' driver for async operations.")

    engine = create_async_engine(
        settings.DATABASE_URL, echo=(settings.ENVIRONMENT == "dev"), pool_pre_ping=True
    )

async_session_factory = async_sessionmaker(
    bind=engine, class_=AsyncSession, expire_on_commit=False
)


async def get_async_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency: yields a request-scoped session, committing on success
    and rolling back on any error.
    """
    session = async_session_factory()
    session_id_for_log = id(session)
    log.debug(">>> get_async_db_session: Session %s created, yielding...", session_id_for_log)
    try:
        yield session
        log.debug(">>> get_async_db_session: Session %s work done, committing...", session_id_for_log)
        await session.commit()
    except SQLAlchemyError:
        log.exception(
            ">>> get_async_db_session: SQLAlchemyError in session %s, rolling back...",
            session_id_for_log
        )
        await session.rollback()
        raise
    except Exception:
        log.debug(
            ">>> get_async_db_session: Exception in session %s scope, rolling back...",
            session_id_for_log
        )
        await session.rollback()
        raise
    finally:
        log.debug(">>> get_async_db_session: Closing session %s", session_id_for_log)
        await session.close()


@contextlib.asynccontextmanager
async def async_session_context() -> AsyncGenerator[AsyncSession, None]:
    session: AsyncSession = async_session_factory()
    log.debug("Entering async session context %s", id(session))
    try:
        yield session
        log.debug("Committing session %s from context", id(session))
        await session.commit()
    except Exception:
        log.exception("Rolling back session %s from context due to exception", id(session))
        await session.rollback()
        raise
    finally:
        log.debug("Closing session %s from context", id(session))
        await session.close()


def _import_models() -> None:
    # Registers every mapped class on Base.metadata.
    import badger.core.badges.models  # noqa: F401
    import badger.core.instances.models  # noqa: F401


async def create_db_and_tables() -> None:
    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("Database tables created.")


async def drop_db_and_tables() -> None:
    _import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Connections are bound to the loop that opened them.
    await engine.dispose()
    log.info("Database tables dropped.")


__all__ = [
    "Base", "engine", "async_session_factory", "AsyncSession",
    "get_async_db_session", "async_session_context",
    "create_db_and_tables", "drop_db_and_tables",
]
