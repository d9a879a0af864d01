from __future__ import annotations

import json
import time
from collections.abc import Awaitable
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from hubp2p_api.core.errors import RateProviderError, RateUnavailableError
from hubp2p_api.core.metrics import (
    rate_fetch_duration,
    rate_fetch_errors_total,
    stale_quotes_total,
)
from shared.constants import rate_cache_key, rate_last_known_key
from shared.contracts import RateSource
from shared.logging import RATE_SOURCE, get_logger
from shared.utils.time import ensure_aware, utc_now

logger = get_logger(__name__)

_RATE_PRECISION = Decimal("0.000001")
_CENTS = Decimal("0.01")
_SATOSHI = Decimal("0.00000001")


class RateClient(Protocol):
    def last_price(self, symbol: str) -> Awaitable[Decimal]: ...


@dataclass(frozen=True)
class RateSnapshot:
    base_rate: Decimal
    final_rate: Decimal
    display_rate: Decimal
    fixed_markup: Decimal
    percentage_markup: Decimal
    fetched_at: datetime
    stale: bool
    source: RateSource


@dataclass(frozen=True)
class _PricePoint:
    price: Decimal
    fetched_at: datetime


def compute_final_rate(base_rate: Decimal, fixed_markup: Decimal, percentage_markup: Decimal) -> Decimal:
    raw = base_rate + fixed_markup + base_rate * percentage_markup
    return raw.quantize(_RATE_PRECISION, rounding=ROUND_HALF_UP)


def convert_brl_to_usd(amount_brl: Decimal, snapshot: RateSnapshot) -> Decimal:
    return (amount_brl / snapshot.final_rate).quantize(_CENTS, rounding=ROUND_HALF_UP)


def convert_usd_to_brl(amount_usd: Decimal, snapshot: RateSnapshot) -> Decimal:
    return (amount_usd * snapshot.final_rate).quantize(_CENTS, rounding=ROUND_HALF_UP)


class ExchangeRateService:
    """Prices BRL against USDT and applies the house markup.

    Two read paths exist. ``authoritative_snapshot`` backs transaction creation and fails
    with ``RateUnavailableError`` when no live price can be obtained. ``advisory_snapshot``
    backs quotes and degrades to the last known price and then to a configured constant,
    flagging the result as stale.
    """

    def __init__(
        self,
        rate_client: RateClient,
        redis_client: Redis | None,
        *,
        rate_symbol: str,
        btc_symbol: str,
        fixed_markup: Decimal,
        percentage_markup: Decimal,
        fallback_base_rate: Decimal,
        cache_ttl_seconds: int = 30,
        last_known_ttl_seconds: int = 6 * 60 * 60,
    ) -> None:
        self._rate_client = rate_client
        self._redis = redis_client
        self._rate_symbol = rate_symbol
        self._btc_symbol = btc_symbol
        self._fixed_markup = fixed_markup
        self._percentage_markup = percentage_markup
        self._fallback_base_rate = fallback_base_rate
        self._cache_ttl_seconds = cache_ttl_seconds
        self._last_known_ttl_seconds = last_known_ttl_seconds

    async def get_base_rate(self) -> Decimal:
        point = await self._live_or_cached(self._rate_symbol)
        return point.price

    async def get_final_rate(self) -> RateSnapshot:
        return await self.authoritative_snapshot()

    async def authoritative_snapshot(self) -> RateSnapshot:
        cached = await self._read_point(rate_cache_key(self._rate_symbol))
        if cached:
            return self.build_snapshot(
                cached.price, fetched_at=cached.fetched_at, stale=False, source=RateSource.CACHE
            )
        try:
            point = await self._fetch_live(self._rate_symbol)
        except RateProviderError as exc:
            raise RateUnavailableError() from exc
        return self.build_snapshot(
            point.price, fetched_at=point.fetched_at, stale=False, source=RateSource.LIVE
        )

    async def advisory_snapshot(self) -> RateSnapshot:
        try:
            return await self.authoritative_snapshot()
        except RateUnavailableError:
            pass

        last_known = await self._read_point(rate_last_known_key(self._rate_symbol))
        if last_known:
            snapshot = self.build_snapshot(
                last_known.price,
                fetched_at=last_known.fetched_at,
                stale=True,
                source=RateSource.LAST_KNOWN,
            )
        else:
            snapshot = self.build_snapshot(
                self._fallback_base_rate,
                fetched_at=utc_now(),
                stale=True,
                source=RateSource.FALLBACK,
            )
        stale_quotes_total.add(1, {"source": snapshot.source.value})
        logger.warning("stale_rate_served", extra={"extra_fields": {RATE_SOURCE: snapshot.source.value}})
        return snapshot

    async def convert_usd_to_btc(self, amount_usd: Decimal) -> Decimal:
        point = await self._live_or_cached(self._btc_symbol)
        return (amount_usd / point.price).quantize(_SATOSHI, rounding=ROUND_HALF_UP)

    def build_snapshot(
        self,
        base_rate: Decimal,
        *,
        fetched_at: datetime,
        stale: bool,
        source: RateSource,
    ) -> RateSnapshot:
        final_rate = compute_final_rate(base_rate, self._fixed_markup, self._percentage_markup)
        return RateSnapshot(
            base_rate=base_rate,
            final_rate=final_rate,
            display_rate=final_rate.quantize(_CENTS, rounding=ROUND_HALF_UP),
            fixed_markup=self._fixed_markup,
            percentage_markup=self._percentage_markup,
            fetched_at=fetched_at,
            stale=stale,
            source=source,
        )

    async def _live_or_cached(self, symbol: str) -> _PricePoint:
        cached = await self._read_point(rate_cache_key(symbol))
        if cached:
            return cached
        return await self._fetch_live(symbol)

    async def _fetch_live(self, symbol: str) -> _PricePoint:
        start = time.perf_counter()
        try:
            price = await self._rate_client.last_price(symbol)
        except RateProviderError as exc:
            rate_fetch_errors_total.add(1, {"symbol": symbol, "category": exc.category.value})
            logger.warning(
                "rate_fetch_failed",
                extra={"extra_fields": {"symbol": symbol, "error_category": exc.category.value}},
            )
            raise
        finally:
            rate_fetch_duration.record((time.perf_counter() - start) * 1000, {"symbol": symbol})

        point = _PricePoint(price=price, fetched_at=utc_now())
        await self._write_point(rate_cache_key(symbol), point, self._cache_ttl_seconds)
        await self._write_point(rate_last_known_key(symbol), point, self._last_known_ttl_seconds)
        return point

    async def _read_point(self, key: str) -> _PricePoint | None:
        if self._redis is None:
            return None
        try:
            raw = await self._redis.get(key)
        except RedisError:
            logger.warning("rate_cache_unavailable", extra={"extra_fields": {"key": key}})
            return None
        if not raw:
            return None
        try:
            decoded = json.loads(raw)
            return _PricePoint(
                price=Decimal(decoded["price"]),
                fetched_at=ensure_aware(datetime.fromisoformat(decoded["fetched_at"])),
            )
        except (ValueError, KeyError, TypeError, ArithmeticError):
            return None

    async def _write_point(self, key: str, point: _PricePoint, ttl_seconds: int) -> None:
        if self._redis is None:
            return
        payload = json.dumps({"price": str(point.price), "fetched_at": point.fetched_at.isoformat()})
        try:
            await self._redis.set(key, payload, ex=ttl_seconds)
        except RedisError:
            logger.warning("rate_cache_unavailable", extra={"extra_fields": {"key": key}})
