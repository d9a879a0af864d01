from __future__ import annotations

from decimal import Decimal

from hubp2p_api.core.errors import RateProviderError, ValidationAppError
from hubp2p_api.services.exchange_rate_service import ExchangeRateService, convert_brl_to_usd
from shared.constants import settlement_symbol_for_network
from shared.contracts import CryptoNetwork, QuoteResponse
from shared.logging import get_logger

logger = get_logger(__name__)
_USDT = "USDT"


class GetQuoteUseCase:
    def __init__(self, rate_service: ExchangeRateService, refresh_after_seconds: int) -> None:
        self._rate_service = rate_service
        self._refresh_after_seconds = refresh_after_seconds

    async def execute(self, amount_brl: Decimal, crypto_network: CryptoNetwork) -> QuoteResponse:
        if amount_brl <= 0:
            raise ValidationAppError("amount_brl must be greater than zero")

        snapshot = await self._rate_service.advisory_snapshot()
        amount_usd = convert_brl_to_usd(amount_brl, snapshot)
        crypto_symbol, crypto_amount = await self._crypto_amount(crypto_network, amount_usd)
        return QuoteResponse(
            amount_brl=amount_brl,
            amount_usd=amount_usd,
            base_rate=snapshot.base_rate,
            final_rate=snapshot.final_rate,
            display_rate=snapshot.display_rate,
            crypto_network=crypto_network,
            crypto_amount=crypto_amount,
            crypto_symbol=crypto_symbol,
            stale=snapshot.stale,
            source=snapshot.source,
            quoted_at=snapshot.fetched_at,
            refresh_after_seconds=self._refresh_after_seconds,
        )

    async def _crypto_amount(
        self, crypto_network: CryptoNetwork, amount_usd: Decimal
    ) -> tuple[str, Decimal]:
        symbol = settlement_symbol_for_network(crypto_network)
        if symbol == _USDT:
            return _USDT, amount_usd
        try:
            return symbol, await self._rate_service.convert_usd_to_btc(amount_usd)
        except RateProviderError:
            logger.warning(
                "btc_quote_degraded",
                extra={"extra_fields": {"crypto_network": crypto_network.value}},
            )
            return _USDT, amount_usd
