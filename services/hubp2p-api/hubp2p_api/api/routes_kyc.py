from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from hubp2p_api.api.dependencies import (
    get_kyc_status_use_case,
    get_submit_kyc_use_case,
    require_user_id,
)
from hubp2p_api.use_cases.kyc_review import GetKycStatusUseCase, SubmitKycUseCase
from shared.contracts import KycSubmissionRequest, KycVerificationResponse

router = APIRouter(tags=["kyc"])


@router.post("/kyc/submissions", status_code=status.HTTP_201_CREATED)
async def submit_kyc(
    payload: KycSubmissionRequest,
    user_id: Annotated[str, Depends(require_user_id)],
    use_case: Annotated[SubmitKycUseCase, Depends(get_submit_kyc_use_case)],
) -> KycVerificationResponse:
    return await use_case.execute(user_id, payload)


@router.get("/kyc/status")
async def get_kyc_status(
    user_id: Annotated[str, Depends(require_user_id)],
    use_case: Annotated[GetKycStatusUseCase, Depends(get_kyc_status_use_case)],
) -> KycVerificationResponse:
    return await use_case.execute(user_id)
