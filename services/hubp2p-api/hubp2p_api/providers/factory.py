from __future__ import annotations

import httpx

from hubp2p_api.core.config import Settings
from hubp2p_api.providers.rate_adapter import BitgetRateAdapter
from shared.resilience import CircuitBreaker, CircuitBreakerConfig


class RateClientFactory:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def create(self) -> BitgetRateAdapter:
        client = httpx.AsyncClient(
            base_url=self._settings.rate_api_base_url,
            timeout=self._settings.rate_timeout_seconds,
            headers={"Accept": "application/json"},
        )
        breaker = CircuitBreaker(
            "rate-provider",
            CircuitBreakerConfig(
                failure_threshold=self._settings.rate_circuit_failure_threshold,
                recovery_timeout_seconds=self._settings.rate_circuit_recovery_seconds,
            ),
        )
        return BitgetRateAdapter(
            client,
            self._settings.rate_api_tickers_path,
            breaker,
            max_attempts=self._settings.rate_max_attempts,
        )
