"""
Database engine and per-request sessions.

Every request works in its own session. Record updates run their version
check, write and audit row inside that session's transaction, so a
request that fails part way must leave nothing behind.
"""

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from backend.app.core.config import settings


def engine_options(database_url: str) -> dict:
    """
    Engine keyword arguments for a database URL.

    Pool sizing applies to server databases only; SQLite files use
    SQLAlchemy's default pool for their dialect.
    """
    options = {"echo": settings.db_echo, "future": True}
    if make_url(database_url).get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            # Drop dead connections up front instead of failing the update
            pool_pre_ping=True,
        )
    return options


engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db():
    """
    FastAPI dependency for database sessions.

    Rolls back whatever the request left uncommitted when it fails,
    including a store call abandoned by a timeout.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
