"""
chefbook_gate.db.session

Async engine, session factory and dev/test schema bootstrap.

Responsibilities:
- Create the async engine from settings (SQLite gets foreign-key enforcement).
- Create the request-scoped sessionmaker.
- Create tables when running without migrations (dev/test only).
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from chefbook_gate.db.base import Base
from chefbook_gate.settings import Settings


def _enable_sqlite_foreign_keys(dbapi_conn: Any, _: Any) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(settings: Settings) -> AsyncEngine:
    engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    if make_url(settings.database_url).get_backend_name() == "sqlite":
        # Bookings reference chef profiles; SQLite ignores that unless asked per connection.
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Handlers serialize ORM rows after commit, so nothing may expire on commit.
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


async def create_schema(engine: AsyncEngine) -> None:
    """
    Create missing tables. Prod deployments run Alembic instead.
    """

    from chefbook_gate.db import models  # noqa: F401  # register tables on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# --- Module Notes -----------------------------------------------------------
# Sessions are opened per request by `api.deps.db_session`; nothing here holds one.
