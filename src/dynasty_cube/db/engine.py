"""Async SQLAlchemy engine and session factory.

Learn: the pool depends on the backend.
- Postgres (asyncpg) gets a sized, pre-pinged pool shared by every request.
- SQLite (aiosqlite) is what the test suite runs on. An in-memory SQLite
  database lives exactly as long as its connection, so the engine gets a
  StaticPool with one connection that every session reuses.

build_engine() and make_session_factory() are used by the app below and
by the test fixtures, so both build sessions the same way
(expire_on_commit=False: rows stay readable after commit without a
reload, which async sessions cannot do lazily).
"""

import structlog
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from dynasty_cube.config import settings

logger = structlog.get_logger()


def build_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine with a pool suited to the URL's backend."""
    if make_url(url).get_backend_name() == "sqlite":
        return create_async_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(
        url,
        echo=echo,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_pre_ping=True,
    )


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# Connects lazily: importing this module never touches the database.
engine = build_engine(settings.database_url, echo=settings.debug)
async_session_factory = make_session_factory(engine)


async def get_db() -> AsyncSession:
    """FastAPI dependency. One session per request, closed afterwards."""
    async with async_session_factory() as session:
        yield session


async def dispose_engine() -> None:
    """Close every pooled connection. Called once at shutdown."""
    await engine.dispose()
    logger.info("db.engine_disposed", backend=engine.dialect.name)
