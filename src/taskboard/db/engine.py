"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode: create_async_engine for connection
pooling, AsyncSession for per-request database access, dependency
injection via FastAPI.

Each request gets exactly one session and each operation is a short
round trip; there are no transactions spanning operations.

Supported backends are PostgreSQL (asyncpg, production) and SQLite
(aiosqlite, tests). Adding a collaborator relies on a dialect-specific
INSERT ... ON CONFLICT DO NOTHING, so any other URL is refused when the
engine is built rather than on the first share.
"""

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskboard.config import settings

SUPPORTED_DIALECTS = ("postgresql", "sqlite")


def check_dialect(database_url: str) -> str:
    """Return the backend name of a database URL, or raise ValueError."""
    backend = make_url(database_url).get_backend_name()
    if backend not in SUPPORTED_DIALECTS:
        raise ValueError(
            f"Unsupported database backend '{backend}' in TASKBOARD_DATABASE_URL; "
            f"expected one of: {', '.join(SUPPORTED_DIALECTS)}"
        )
    return backend


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an engine. SQLite (tests, local hacking) gets no pool sizing."""
    if check_dialect(database_url) == "sqlite":
        return create_async_engine(database_url, echo=echo)
    return create_async_engine(
        database_url,
        echo=echo,
        pool_size=5,
        max_overflow=15,
    )


# echo=True in debug mode to see SQL queries.
engine = build_engine(settings.database_url, echo=settings.debug)

# Session factory: each request gets its own session.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncSession:
    """FastAPI dependency: yields a session per request, auto-closes."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create all tables directly from the models (development only).

    Production schemas are managed by Alembic (db/migrations).
    """
    from taskboard.db.models import Base

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
