from __future__ import annotations

import time
from dataclasses import dataclass
from threading import RLock
from typing import Dict

from mp3_gateway.logging_utils import get_logger


logger = get_logger(__name__)


@dataclass
class CircuitBreakerState:
    """In-memory state for a single transcoder's breaker."""

    failure_count: int = 0
    opened_at: float = 0.0
    state: str = "closed"  # "closed" | "open" | "half_open"


@dataclass
class CircuitBreakerConfig:
    failure_threshold: int = 5
    reset_timeout_seconds: int = 30


class CircuitBreakerRegistry:
    """Tracks consecutive transcoder failures per transcoder id.

    While a breaker is open, conversions fail fast instead of queueing up
    behind a transcoder that keeps timing out or crashing.
    """

    def __init__(self, config: CircuitBreakerConfig | None = None) -> None:
        self._config = config or CircuitBreakerConfig()
        self._lock = RLock()
        self._states: Dict[str, CircuitBreakerState] = {}

    def _get_state(self, key: str) -> CircuitBreakerState:
        with self._lock:
            state = self._states.get(key)
            if state is None:
                state = CircuitBreakerState()
                self._states[key] = state
            return state

    def state_of(self, key: str) -> str:
        return self._get_state(key).state

    def allow_request(self, key: str) -> bool:
        """Return True if a conversion should be attempted for this transcoder."""
        state = self._get_state(key)
        now = time.time()

        with self._lock:
            if state.state == "open":
                if now - state.opened_at >= self._config.reset_timeout_seconds:
                    logger.warning("Circuit breaker HALF_OPEN for transcoder=%s", key)
                    state.state = "half_open"
                    return True
                logger.warning(
                    "Circuit breaker OPEN - rejecting conversion for transcoder=%s",
                    key,
                )
                return False

        return True

    def record_success(self, key: str) -> None:
        state = self._get_state(key)
        with self._lock:
            if state.failure_count or state.state != "closed":
                logger.info(
                    "Circuit breaker SUCCESS for transcoder=%s (state=%s, failures=%d)",
                    key,
                    state.state,
                    state.failure_count,
                )
            state.failure_count = 0
            state.state = "closed"
            state.opened_at = 0.0

    def record_failure(self, key: str) -> None:
        """Record a failed conversion and open the breaker at the threshold."""
        state = self._get_state(key)
        with self._lock:
            state.failure_count += 1
            logger.warning(
                "Circuit breaker failure for transcoder=%s (count=%d)",
                key,
                state.failure_count,
            )
            if state.state == "half_open" or (
                state.failure_count >= self._config.failure_threshold
            ):
                state.state = "open"
                state.opened_at = time.time()
                logger.error(
                    "Circuit breaker OPEN for transcoder=%s after %d failures",
                    key,
                    state.failure_count,
                )
