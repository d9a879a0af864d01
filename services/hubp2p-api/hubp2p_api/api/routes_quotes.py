from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from hubp2p_api.api.dependencies import get_quote_use_case
from hubp2p_api.use_cases.get_quote import GetQuoteUseCase
from shared.contracts import CryptoNetwork, QuoteResponse

router = APIRouter(tags=["quotes"])


@router.get("/quotes")
async def get_quote(
    use_case: Annotated[GetQuoteUseCase, Depends(get_quote_use_case)],
    amount_brl: Annotated[Decimal, Query(gt=0, max_digits=18, decimal_places=2)],
    crypto_network: Annotated[CryptoNetwork, Query()] = CryptoNetwork.ETHEREUM,
) -> QuoteResponse:
    return await use_case.execute(amount_brl, crypto_network)
