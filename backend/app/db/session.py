"""Async engine and request sessions for the Taskflow database.

Startup either upgrades the schema through the Alembic revisions under
``backend/migrations`` or, when auto-migration is off or no revision exists,
creates the tables straight from SQLModel metadata.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

from alembic.config import Config
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from app import models as _models
from app.core.config import settings
from app.core.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

# Projects, tasks, subtasks, activity and notification tables must be on the
# metadata before create_all or Alembic autogenerate reads it.
_MODEL_REGISTRY = _models

_BACKEND_ROOT = Path(__file__).resolve().parents[2]
_ALEMBIC_INI = _BACKEND_ROOT / "alembic.ini"
_REVISIONS_DIR = _BACKEND_ROOT / "migrations" / "versions"
_SYNC_POSTGRES_SCHEMES = frozenset({"postgres", "postgresql"})

logger = get_logger(__name__)


def async_database_url(database_url: str) -> str:
    """Route plain Postgres URLs through the async psycopg driver."""
    scheme, sep, rest = database_url.partition("://")
    if sep and scheme in _SYNC_POSTGRES_SCHEMES:
        return f"postgresql+psycopg://{rest}"
    return database_url


def _create_engine(database_url: str) -> AsyncEngine:
    if database_url.startswith("sqlite"):
        # In-memory and file SQLite databases are used by tests and local runs.
        return create_async_engine(database_url)
    return create_async_engine(database_url, pool_pre_ping=True)


async_engine: AsyncEngine = _create_engine(async_database_url(settings.database_url))
async_session_maker = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def run_migrations() -> None:
    """Upgrade the Taskflow schema to the newest Alembic revision."""
    from alembic import command

    config = Config(str(_ALEMBIC_INI))
    config.attributes["configure_logger"] = False
    logger.info("db.migrations.started", extra={"revisions_dir": str(_REVISIONS_DIR)})
    command.upgrade(config, "head")
    logger.info("db.migrations.complete")


async def init_db() -> None:
    if settings.db_auto_migrate:
        if any(_REVISIONS_DIR.glob("*.py")):
            await asyncio.to_thread(run_migrations)
            return
        logger.warning("db.migrations.missing", extra={"revisions_dir": str(_REVISIONS_DIR)})

    async with async_engine.connect() as conn, conn.begin():
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("db.schema.created", extra={"tables": len(SQLModel.metadata.tables)})


async def _discard_open_transaction(session: AsyncSession) -> None:
    try:
        if not session.in_transaction():
            return
        await session.rollback()
    except SQLAlchemyError:
        logger.exception("db.session.rollback_failed")


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request session; uncommitted work is rolled back when the request ends."""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await _discard_open_transaction(session)
