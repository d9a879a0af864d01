from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from shared.logging import get_logger
from shared.utils.time import utc_now

logger = get_logger(__name__)


class CircuitBreakerOpenError(RuntimeError):
    pass


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreakerConfig:
    failure_threshold: int = 3
    recovery_timeout_seconds: int = 30


class CircuitBreaker:
    """Guards an upstream dependency so repeated failures short-circuit to the caller's fallback."""

    def __init__(
        self,
        name: str,
        config: CircuitBreakerConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._name = name
        self._config = config or CircuitBreakerConfig()
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._opened_at: datetime | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> str:
        if self._state == CircuitState.OPEN and self._can_half_open():
            self._state = CircuitState.HALF_OPEN
        return self._state.value

    def allow_call(self) -> None:
        if self._state == CircuitState.OPEN and not self._can_half_open():
            raise CircuitBreakerOpenError(f"Circuit {self._name} is open")
        if self._state == CircuitState.OPEN:
            self._state = CircuitState.HALF_OPEN

    def on_success(self) -> None:
        if self._state != CircuitState.CLOSED:
            logger.info("circuit_closed", extra={"extra_fields": {"circuit": self._name}})
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._opened_at = None

    def on_failure(self) -> None:
        if self._state == CircuitState.HALF_OPEN:
            self._trip_open()
            return
        self._failures += 1
        if self._failures >= self._config.failure_threshold:
            self._trip_open()

    def _trip_open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = self._clock()
        logger.warning(
            "circuit_opened",
            extra={"extra_fields": {"circuit": self._name, "failures": self._failures}},
        )

    def _can_half_open(self) -> bool:
        if not self._opened_at:
            return False
        recover_at = self._opened_at + timedelta(seconds=self._config.recovery_timeout_seconds)
        return self._clock() >= recover_at
