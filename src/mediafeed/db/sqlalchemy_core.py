"""Core async database components using SQLAlchemy and SQLModel."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
import logging
from pathlib import Path
import sqlite3

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import ConnectionPoolEntry

logger = logging.getLogger(__name__)

DB_FILENAME = "mediafeed.db"


class SqlalchemyCore:
    """Core wrapper for SQLAlchemy async operations on the local database."""

    def __init__(self, db_dir: Path) -> None:
        db_path = db_dir / DB_FILENAME
        db_url = f"sqlite+aiosqlite:///{db_path.resolve()}"
        self.engine: AsyncEngine = create_async_engine(
            db_url,
            echo=logger.isEnabledFor(logging.DEBUG),
            pool_size=1,  # SQLite only supports a single writer
            connect_args={
                "check_same_thread": False,
                "timeout": 30.0,
            },
        )
        self.async_session_maker = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )
        logger.debug("Database engine created.", extra={"db_path": str(db_path)})

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession]:
        """Provide a transactional session that is closed after use.

        Yields:
            An active, transactional AsyncSession.
        """
        async with self.async_session_maker() as session:
            yield session

    async def close(self) -> None:
        """Close the database engine and all its connections."""
        await self.engine.dispose()


@event.listens_for(Engine, "connect")
def _(
    dbapi_connection: sqlite3.Connection, _connection_record: ConnectionPoolEntry
) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode = WAL;")
    cursor.execute("PRAGMA synchronous = NORMAL;")
    cursor.close()
