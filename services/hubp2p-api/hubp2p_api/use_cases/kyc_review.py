from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hubp2p_api.core.errors import AppError, NotFoundError, ValidationAppError
from hubp2p_api.db.guards import store_write
from hubp2p_api.repositories.kyc_repository import KycRepository
from hubp2p_api.repositories.profile_repository import ProfileRepository
from hubp2p_api.services.admin_session_service import AdminPrincipal
from shared.contracts import (
    ErrorCategory,
    KycRejectRequest,
    KycStatus,
    KycSubmissionRequest,
    KycVerificationResponse,
)
from shared.logging import ADMIN_ID, STATUS, USER_ID, get_logger
from shared.utils.time import utc_now
from shared.utils.validation import blank_to_none

logger = get_logger(__name__)
_NOT_FOUND_MESSAGE = "KYC verification not found"

_REVIEW_SOURCES = {
    KycStatus.IN_REVIEW: frozenset({KycStatus.PENDING}),
    KycStatus.APPROVED: frozenset({KycStatus.PENDING, KycStatus.IN_REVIEW}),
    KycStatus.REJECTED: frozenset({KycStatus.PENDING, KycStatus.IN_REVIEW}),
}


class KycTransitionError(AppError):
    def __init__(self, current: KycStatus, target: KycStatus) -> None:
        super().__init__(
            ErrorCategory.INVALID_TRANSITION,
            f"Cannot move KYC from {current.value} to {target.value}",
            http_status=409,
        )


class SubmitKycUseCase:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def execute(self, user_id: str, request: KycSubmissionRequest) -> KycVerificationResponse:
        async with self._session_factory() as session:
            if await ProfileRepository(session).get_by_id(user_id) is None:
                raise NotFoundError("Profile not found")
            async with store_write(session, "submit_kyc"):
                verification = KycRepository(session).create(
                    user_id=user_id,
                    full_name=request.full_name.strip(),
                    document_type=request.document_type.strip(),
                    document_number=request.document_number.strip(),
                    birth_date=request.birth_date,
                    now=utc_now(),
                )
                await session.commit()
        logger.info("kyc_submitted", extra={"extra_fields": {USER_ID: user_id}})
        return KycVerificationResponse.model_validate(verification)


class GetKycStatusUseCase:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def execute(self, user_id: str) -> KycVerificationResponse:
        async with self._session_factory() as session:
            verification = await KycRepository(session).latest_for_user(user_id)
        if verification is None:
            raise NotFoundError(_NOT_FOUND_MESSAGE)
        return KycVerificationResponse.model_validate(verification)


class ListKycUseCase:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def execute(self, status: KycStatus | None, limit: int) -> list[KycVerificationResponse]:
        async with self._session_factory() as session:
            verifications = await KycRepository(session).list_by_status(status, limit=limit)
        return [KycVerificationResponse.model_validate(item) for item in verifications]


class ReviewKycUseCase:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def start_review(
        self, verification_id: UUID, admin: AdminPrincipal
    ) -> KycVerificationResponse:
        return await self._move(verification_id, KycStatus.IN_REVIEW, admin, {})

    async def approve(self, verification_id: UUID, admin: AdminPrincipal) -> KycVerificationResponse:
        return await self._move(
            verification_id,
            KycStatus.APPROVED,
            admin,
            {"verified_at": utc_now(), "rejection_reason": None},
        )

    async def reject(
        self, verification_id: UUID, request: KycRejectRequest, admin: AdminPrincipal
    ) -> KycVerificationResponse:
        reason = blank_to_none(request.reason)
        if reason is None:
            raise ValidationAppError("A rejection reason is required")
        return await self._move(
            verification_id, KycStatus.REJECTED, admin, {"rejection_reason": reason}
        )

    async def _move(
        self,
        verification_id: UUID,
        target: KycStatus,
        admin: AdminPrincipal,
        extra_values: dict,
    ) -> KycVerificationResponse:
        allowed_from = _REVIEW_SOURCES[target]
        async with self._session_factory() as session:
            kyc = KycRepository(session)
            verification = await kyc.get(verification_id)
            if verification is None:
                raise NotFoundError(_NOT_FOUND_MESSAGE)
            if verification.status not in allowed_from:
                raise KycTransitionError(verification.status, target)

            values = {
                "status": target,
                "reviewed_by": admin.admin_id,
                "updated_at": utc_now(),
                **extra_values,
            }
            async with store_write(session, "review_kyc"):
                if not await kyc.update_status(
                    verification_id, allowed_from=allowed_from, values=values
                ):
                    await session.rollback()
                    current = (await kyc.get(verification_id)) or verification
                    raise KycTransitionError(current.status, target)
                await session.commit()
            await session.refresh(verification)

        logger.info(
            "kyc_reviewed",
            extra={
                "extra_fields": {
                    USER_ID: verification.user_id,
                    ADMIN_ID: str(admin.admin_id),
                    STATUS: target.value,
                }
            },
        )
        return KycVerificationResponse.model_validate(verification)
