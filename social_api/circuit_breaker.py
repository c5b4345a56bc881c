"""A circuit breaker guarding calls to an external service."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from collections.abc import Callable
from enum import Enum

from social_api.config import CircuitBreakerConfig

logger = logging.getLogger(__name__)


class BreakerState(str, Enum):
    """Whether calls are allowed, blocked, or being tried out."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


StateListener = Callable[[str, BreakerState], None]


class CircuitBreaker:
    """Opens after consecutive failures or a failure rate above 50%.

    After ``recovery_timeout_secs`` an open breaker lets calls through again
    (half-open); ``success_threshold`` consecutive successes close it and any
    failure opens it again.
    """

    def __init__(
        self,
        name: str,
        config: CircuitBreakerConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        on_state_change: StateListener | None = None,
    ) -> None:
        self.name = name
        self.config = config if config is not None else CircuitBreakerConfig()
        self._clock = clock
        self._listener = on_state_change
        self._lock = threading.Lock()
        self._state = BreakerState.CLOSED
        self._consecutive_failures = 0
        self._consecutive_successes = 0
        self._opened_at: float | None = None
        self._recent_calls: deque[tuple[float, bool]] = deque()
        self._record_state(BreakerState.CLOSED)

    @property
    def state(self) -> BreakerState:
        """The current state, without triggering any transition."""
        with self._lock:
            return self._state

    def _record_state(self, state: BreakerState) -> None:
        if self._listener is not None:
            self._listener(self.name, state)

    def _transition(self, state: BreakerState, message: str, **extra: object) -> None:
        logger.warning("Circuit breaker transitioning: %s", message, extra={"service": self.name, **extra})
        self._state = state

    def is_call_permitted(self) -> bool:
        """Return whether a call may go ahead, moving OPEN to HALF-OPEN when due."""
        with self._lock:
            if self._state is not BreakerState.OPEN:
                return True
            if (
                self._opened_at is not None
                and self._clock() - self._opened_at >= self.config.recovery_timeout_secs
            ):
                self._transition(BreakerState.HALF_OPEN, "OPEN -> HALF-OPEN")
                self._consecutive_successes = 0
                self._record_state(BreakerState.HALF_OPEN)
                return True
            return False

    def on_success(self) -> None:
        """Record a successful call."""
        with self._lock:
            now = self._clock()
            self._recent_calls.append((now, True))
            self._cleanup_window(now)

            if self._state is BreakerState.CLOSED:
                self._consecutive_failures = 0
            elif self._state is BreakerState.HALF_OPEN:
                self._consecutive_successes += 1
                if self._consecutive_successes >= self.config.success_threshold:
                    self._transition(BreakerState.CLOSED, "HALF-OPEN -> CLOSED")
                    self._consecutive_failures = 0
                    self._consecutive_successes = 0
                    self._recent_calls.clear()
                    self._record_state(BreakerState.CLOSED)

    def on_error(self) -> None:
        """Record a failed call."""
        with self._lock:
            now = self._clock()
            self._recent_calls.append((now, False))
            self._cleanup_window(now)

            if self._state is BreakerState.CLOSED:
                self._consecutive_failures += 1
                total = len(self._recent_calls)
                failed = sum(1 for _, success in self._recent_calls if not success)
                high_failure_rate = (
                    total >= self.config.failure_threshold and failed / total > 0.5
                )
                if (
                    self._consecutive_failures >= self.config.failure_threshold
                    or high_failure_rate
                ):
                    reason = ">50% failure rate" if high_failure_rate else "consecutive failures"
                    self._transition(BreakerState.OPEN, "CLOSED -> OPEN", reason=reason)
                    self._opened_at = now
                    self._record_state(BreakerState.OPEN)
            elif self._state is BreakerState.HALF_OPEN:
                self._transition(BreakerState.OPEN, "HALF-OPEN -> OPEN")
                self._opened_at = now
                self._record_state(BreakerState.OPEN)
            else:
                self._opened_at = now
                self._record_state(BreakerState.OPEN)

    def _cleanup_window(self, now: float) -> None:
        window = self.config.recovery_timeout_secs
        while self._recent_calls and now - self._recent_calls[0][0] > window:
            self._recent_calls.popleft()