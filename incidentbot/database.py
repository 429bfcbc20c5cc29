"""Database lifecycle for the bot's stores (incidents, topics, ACLs, contacts)."""

from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import BotConfig
from .models import Base
from .utils.logging import get_logger

logger = get_logger("incidentbot.database")

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def is_file_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite") and ":memory:" not in database_url


async def _enable_wal(engine: AsyncEngine) -> None:
    # Background topic writes run next to command handlers on the same file
    async with engine.begin() as conn:
        await conn.execute(text("PRAGMA journal_mode=WAL"))


async def open_database(config: BotConfig) -> async_sessionmaker[AsyncSession]:
    """Create the engine and any missing tables, and return the session factory.

    Later calls return the factory built by the first one until
    ``close_database`` is awaited.
    """
    global _engine, _session_factory
    if _session_factory is not None:
        return _session_factory

    file_sqlite = is_file_sqlite(config.database_url)
    # sqlite3 applies the timeout to every pooled connection
    connect_args = {"timeout": config.db_busy_timeout_ms / 1000} if file_sqlite else {}
    engine = create_async_engine(
        config.database_url, echo=config.debug, pool_pre_ping=True, connect_args=connect_args
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    if file_sqlite:
        await _enable_wal(engine)

    _engine = engine
    _session_factory = async_sessionmaker(engine, expire_on_commit=False)
    logger.info(
        "database_opened",
        url=engine.url.render_as_string(hide_password=True),
        tables=sorted(Base.metadata.tables),
        wal=file_sqlite,
    )
    return _session_factory


async def close_database() -> None:
    global _engine, _session_factory
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
    logger.info("database_closed")
