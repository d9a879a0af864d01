from __future__ import annotations

from decimal import Decimal, InvalidOperation

import httpx

from hubp2p_api.core.errors import (
    RateProvider5xxError,
    RateProviderError,
    RateProviderRejectedError,
    RateProviderTimeoutError,
)
from shared.logging import get_logger
from shared.resilience import CircuitBreaker, CircuitBreakerOpenError, retry_async

logger = get_logger(__name__)


def _is_transient(exc: Exception) -> bool:
    return isinstance(exc, RateProviderTimeoutError | RateProvider5xxError)


class BitgetRateAdapter:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        tickers_path: str,
        breaker: CircuitBreaker,
        max_attempts: int = 3,
    ) -> None:
        self._http_client = http_client
        self._tickers_path = tickers_path
        self._breaker = breaker
        self._max_attempts = max_attempts

    async def last_price(self, symbol: str) -> Decimal:
        try:
            self._breaker.allow_call()
        except CircuitBreakerOpenError as exc:
            raise RateProviderRejectedError("Rate provider circuit is open") from exc

        try:
            price = await retry_async(
                lambda: self._fetch_once(symbol),
                should_retry=_is_transient,
                max_attempts=self._max_attempts,
                on_retry=lambda attempt, exc: logger.warning(
                    "rate_fetch_retry",
                    extra={"extra_fields": {"symbol": symbol, "attempt": attempt, "error": str(exc)}},
                ),
            )
        except RateProviderError:
            self._breaker.on_failure()
            raise
        self._breaker.on_success()
        return price

    async def _fetch_once(self, symbol: str) -> Decimal:
        try:
            response = await self._http_client.get(self._tickers_path, params={"symbol": symbol})
        except httpx.TimeoutException as exc:
            raise RateProviderTimeoutError() from exc
        except httpx.TransportError as exc:
            raise RateProvider5xxError(f"Rate provider transport error: {exc}") from exc

        if response.status_code >= 500:
            raise RateProvider5xxError(f"Rate provider returned {response.status_code}")
        if response.status_code >= 400:
            raise RateProviderRejectedError(f"Rate provider returned {response.status_code}")
        return _parse_last_price(response, symbol)

    async def close(self) -> None:
        await self._http_client.aclose()


def _parse_last_price(response: httpx.Response, symbol: str) -> Decimal:
    try:
        body = response.json()
    except ValueError as exc:
        raise RateProviderRejectedError("Rate provider returned invalid JSON") from exc

    data = body.get("data") if isinstance(body, dict) else None
    if not data or not isinstance(data, list) or not isinstance(data[0], dict):
        raise RateProviderRejectedError(f"Rate provider returned no ticker for {symbol}")

    raw_price = data[0].get("lastPr")
    try:
        price = Decimal(str(raw_price))
    except (InvalidOperation, ValueError) as exc:
        raise RateProviderRejectedError(f"Invalid price for {symbol}: {raw_price!r}") from exc
    if not price.is_finite() or price <= 0:
        raise RateProviderRejectedError(f"Invalid price for {symbol}: {raw_price!r}")
    return price
