"""
ReqCheck — Database Session Management
======================================

What:  Async SQLAlchemy engine, session factory, and schema bootstrap.
How:   Creates an async engine from settings; the movie store opens one
       session per operation from `async_session_factory`.
Who:   Used by MovieStore, the health route, and the app lifespan.
When:  Engine is created at module import; sessions are created per call.
"""

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from reqcheck.config import settings


def _engine_options() -> Dict[str, Any]:
    """Pool options for server databases; SQLite pools take none of them."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options())

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def init_db(target: Optional[AsyncEngine] = None, drop_existing: bool = False) -> None:
    """
    Create every table registered on Base.metadata.

    When:  Application startup (lifespan) and test fixtures.
    How:   Runs metadata.create_all inside a transaction; with
           drop_existing the tables are dropped first for a clean slate.
    """
    # Models must be imported so their tables are registered on the metadata
    from reqcheck.models import movie  # noqa: F401

    target = target or engine
    async with target.begin() as conn:
        if drop_existing:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
