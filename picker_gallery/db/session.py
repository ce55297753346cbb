"""Async engine and session factory for the gallery database."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AsyncIterator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from picker_gallery.core.config import settings
from picker_gallery.db.base import Base

logger = logging.getLogger("picker_gallery.db")


def _ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite") or not url.database or url.database == ":memory:":
        return
    Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)


def build_engine(database_url: str) -> AsyncEngine:
    """Create an async engine, preparing local storage for SQLite URLs."""
    _ensure_sqlite_directory(database_url)
    return create_async_engine(database_url, future=True)


engine = build_engine(settings.database_url)
async_session = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_session() -> AsyncIterator[AsyncSession]:
    async with async_session() as session:
        yield session


async def init_models(target: AsyncEngine | None = None) -> None:
    """Create gallery tables and indexes if they do not exist yet."""
    bind = target or engine
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Gallery tables ready on %s", bind.url.render_as_string(hide_password=True))
