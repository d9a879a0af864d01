from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.contracts import AdminSessionORM, AdminUserORM


class AdminSessionRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_with_admin(
        self, token_hash: str
    ) -> tuple[AdminSessionORM, AdminUserORM] | None:
        stmt = (
            select(AdminSessionORM, AdminUserORM)
            .join(AdminUserORM, AdminUserORM.id == AdminSessionORM.admin_id)
            .where(AdminSessionORM.token_hash == token_hash)
        )
        row = (await self._session.execute(stmt)).first()
        if row is None:
            return None
        return row[0], row[1]
