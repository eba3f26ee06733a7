from __future__ import annotations

"""Database setup for SQLAlchemy with async drivers.

The engine is built from settings by the application at start-up and passed
down explicitly; nothing in this module opens connections at import time.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool
from sqlalchemy.schema import CreateColumn

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all ORM models."""


def make_engine(url: str, **kwargs: Any) -> AsyncEngine:
    """Create an async engine.

    Server databases get resilient pool settings to survive restarts:
    - pool_pre_ping: validate connections before using
    - pool_recycle: proactively recycle connections to avoid server-side timeouts
    SQLite (development, tests) uses no pooling.
    """
    options: dict[str, Any] = {"echo": False}
    if url.startswith("sqlite"):
        options["poolclass"] = NullPool
    else:
        options.update(pool_pre_ping=True, pool_recycle=1800)
    options.update(kwargs)
    return create_async_engine(url, **options)


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@asynccontextmanager
async def get_session(
    sessionmaker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Provide a transactional scope around a series of operations."""

    async with sessionmaker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def _sync_init(sync_conn) -> None:  # type: ignore[no-untyped-def]
    Base.metadata.create_all(sync_conn)
    inspector = inspect(sync_conn)
    for table in Base.metadata.tables.values():
        existing = {col["name"] for col in inspector.get_columns(table.name)}
        for column in table.columns:
            if column.name not in existing:
                col_ddl = CreateColumn(column.copy()).compile(dialect=sync_conn.dialect)
                sync_conn.execute(text(f"ALTER TABLE {table.name} ADD COLUMN {col_ddl}"))


async def init_db(engine: AsyncEngine, max_attempts: int = 5, delay: float = 5) -> None:
    """Create tables and add missing columns if necessary.

    Attempts to connect to the database multiple times with a delay
    between attempts. If all attempts fail, the last exception is propagated.
    """

    # Import models to ensure Base.metadata is populated
    from . import models  # noqa: F401

    last_exc: SQLAlchemyError | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            async with engine.begin() as conn:
                await conn.run_sync(_sync_init)
            logger.info("DB schema ensured (attempt %d)", attempt)
            return
        except SQLAlchemyError as exc:
            last_exc = exc
            if attempt == max_attempts:
                break
            logger.warning("DB init attempt %d failed: %s. Retrying in %ss", attempt, exc, delay)
            await asyncio.sleep(delay)

    logger.error("DB init failed after %d attempts", max_attempts)
    if last_exc is not None:
        raise last_exc


__all__ = ["Base", "make_engine", "make_sessionmaker", "get_session", "init_db"]
