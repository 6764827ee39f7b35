"""Async engine, session factory and model registry."""

import logging
import time
from collections.abc import AsyncIterator

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.engine.url import URL
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from .config import settings

logger = logging.getLogger(__name__)

ASYNC_DRIVERS = {
    "postgresql": "postgresql+asyncpg",
    "mysql": "mysql+asyncmy",
    "sqlite": "sqlite+aiosqlite",
}
# Accepted aliases for the backend part of a URL.
BACKEND_ALIASES = {"postgres": "postgresql"}


def resolve_async_database_url(raw_url: str) -> str:
    """Rewrite a DATABASE_URL so that it names the async driver for its backend."""
    url = make_url(raw_url)
    backend = url.drivername.lower().partition("+")[0]
    backend = BACKEND_ALIASES.get(backend, backend)
    target = ASYNC_DRIVERS.get(backend)
    if target is None:
        raise ValueError(
            f"Unsupported database dialect '{url.drivername}'; "
            "use PostgreSQL (asyncpg), MySQL (asyncmy) or SQLite (aiosqlite)."
        )
    if url.drivername.lower() == target:
        return raw_url
    rewritten: URL = url.set(drivername=target)
    return rewritten.render_as_string(hide_password=False)


class Base(DeclarativeBase):
    """Declarative base shared by every scheduler table."""


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
    # SQLite ignores foreign keys unless asked per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _attach_slow_query_logging(engine: AsyncEngine, threshold_seconds: float) -> None:
    sync_engine = engine.sync_engine

    @event.listens_for(sync_engine, "before_cursor_execute")
    def _start_timer(conn, _cursor, _statement, _parameters, _context, _executemany):
        conn.info.setdefault("query_started_at", []).append(time.perf_counter())

    @event.listens_for(sync_engine, "after_cursor_execute")
    def _report_slow(conn, _cursor, statement, _parameters, _context, _executemany):
        elapsed = time.perf_counter() - conn.info["query_started_at"].pop()
        if elapsed > threshold_seconds:
            logger.warning("Slow query (%.2fs): %s", elapsed, statement[:200])


def build_engine(raw_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with backend-specific connection settings."""
    url = resolve_async_database_url(raw_url)
    backend = make_url(url).get_backend_name()
    options: dict = {"echo": echo, "future": True}
    if backend != "sqlite":
        options["pool_pre_ping"] = True

    engine = create_async_engine(url, **options)
    if backend == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    if settings.slow_query_threshold_seconds > 0:
        _attach_slow_query_logging(engine, settings.slow_query_threshold_seconds)
    return engine


DATABASE_URL = resolve_async_database_url(settings.database_url)

engine = build_engine(DATABASE_URL, echo=settings.debug)
AsyncSessionLocal = async_sessionmaker(
    engine,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False,
)


async def get_db() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        yield session


def import_models() -> None:
    """Register every ORM model on ``Base.metadata``."""
    from scheduler.modules.appointments import models as _appointments  # noqa: F401
    from scheduler.modules.practitioners import models as _practitioners  # noqa: F401
    from scheduler.modules.schedule import models as _schedule  # noqa: F401
