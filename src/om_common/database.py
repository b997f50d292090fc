"""Async engine, session factory and the declarative base for ORM tables.

Repositories issue Core statements on the session; the ORM classes exist for
table metadata (alembic drift checks) rather than for unit-of-work tracking.
`DB_COMMAND_TIMEOUT_SECONDS` bounds every statement so a stuck query surfaces
as a timeout instead of hanging the request.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    pass


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
    connect_args={"command_timeout": settings.DB_COMMAND_TIMEOUT_SECONDS},
)

async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request.

    Services open their own `async with db.begin()` blocks, so handlers must
    not touch the session before delegating.
    """
    async with async_session_factory() as session:
        yield session
