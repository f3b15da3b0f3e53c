"""Database engine, session factory and declarative base."""

from typing import Annotated, Any, AsyncGenerator

from fastapi import Depends
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import (
    AsyncAttrs,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from vulcan.config import get_settings

settings = get_settings()


class Base(AsyncAttrs, DeclarativeBase):
    """Declarative base for all Vulcan models."""


def _engine_options(database_url: str) -> dict[str, Any]:
    """Pool options only apply to server databases."""
    options: dict[str, Any] = {"echo": settings.database_echo}
    if not database_url.startswith("sqlite"):
        options["pool_size"] = settings.database_pool_size
        options["max_overflow"] = settings.database_max_overflow
        options["pool_pre_ping"] = True
    return options


def enable_sqlite_savepoints(sync_engine: Engine) -> None:
    """Let pysqlite honour SAVEPOINT and enforce foreign keys.

    The driver's own transaction handling issues BEGIN lazily, which breaks
    ``begin_nested()``; emit BEGIN ourselves instead.
    """

    @event.listens_for(sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))
if settings.database_url.startswith("sqlite"):
    enable_sqlite_savepoints(engine.sync_engine)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session for one request, committing on success."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


DbSession = Annotated[AsyncSession, Depends(get_db)]


async def init_db() -> None:
    """Create tables that do not exist yet."""
    # Import models so every table is registered on the metadata
    import vulcan.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the engine connection pool."""
    await engine.dispose()
