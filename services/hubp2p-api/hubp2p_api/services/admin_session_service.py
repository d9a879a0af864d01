from __future__ import annotations

import hashlib
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hubp2p_api.core.errors import UnauthenticatedError
from hubp2p_api.core.metrics import admin_auth_failures_total
from hubp2p_api.repositories.admin_session_repository import AdminSessionRepository
from shared.logging import get_logger
from shared.utils.time import ensure_aware, utc_now

logger = get_logger(__name__)


def hash_session_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class AdminPrincipal:
    admin_id: UUID
    email: str


class AdminSessionService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def authenticate(self, token: str | None) -> AdminPrincipal:
        if not token or not token.strip():
            return self._reject("missing_credential")

        async with self._session_factory() as session:
            row = await AdminSessionRepository(session).get_with_admin(
                hash_session_token(token.strip())
            )
        if row is None:
            return self._reject("unknown_session")

        admin_session, admin = row
        if ensure_aware(admin_session.expires_at) <= utc_now():
            return self._reject("expired_session")
        if not admin.is_active:
            return self._reject("inactive_admin")
        return AdminPrincipal(admin_id=admin.id, email=admin.email)

    def _reject(self, reason: str) -> AdminPrincipal:
        admin_auth_failures_total.add(1, {"reason": reason})
        logger.warning("admin_auth_rejected", extra={"extra_fields": {"reason": reason}})
        raise UnauthenticatedError()
