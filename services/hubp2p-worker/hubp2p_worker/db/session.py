from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def build_engine(postgres_dsn: str, *, pool_size: int = 5) -> AsyncEngine:
    return create_async_engine(
        postgres_dsn, echo=False, pool_pre_ping=True, pool_size=pool_size, max_overflow=5
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
