"""SQLAlchemy engines and session helpers.

The API runs on the async engine; the sync engine is kept for schema
bootstrap and Alembic.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from scribe.config import settings


class Base(DeclarativeBase):
    """Declarative base class for ORM models."""


def _ensure_sqlite_dir(url: str) -> None:
    if url.startswith("sqlite:///") and ":memory:" not in url:
        Path(url.removeprefix("sqlite:///")).parent.mkdir(parents=True, exist_ok=True)


_ensure_sqlite_dir(settings.database_url)

engine: Engine = create_engine(
    settings.database_url,
    echo=settings.db_echo,
    pool_pre_ping=True,
    connect_args={"check_same_thread": False},
)

async_engine = create_async_engine(
    settings.resolved_async_database_url,
    echo=settings.db_echo,
    pool_pre_ping=True,
)
AsyncSessionLocal = async_sessionmaker(bind=async_engine, expire_on_commit=False)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session for FastAPI dependencies."""
    async with AsyncSessionLocal() as session:
        yield session


def init_database(bind: Engine | None = None) -> None:
    """Create every table registered on the declarative metadata."""
    # Model modules register their tables on import.
    from scribe.models import category, post, user  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
