from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hubp2p_api.core.errors import StoreUnavailableError
from shared.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def store_write(session: AsyncSession, operation: str) -> AsyncIterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error(
            "store_write_failed",
            extra={"extra_fields": {"operation": operation, "error": type(exc).__name__}},
        )
        raise StoreUnavailableError() from exc
