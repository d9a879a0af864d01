from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.contracts import ProfileORM


class ProfileRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: str) -> ProfileORM | None:
        stmt = select(ProfileORM).where(ProfileORM.id == user_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()
