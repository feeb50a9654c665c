"""
Error handling policy interpretation.

Agents describe their retry and circuit-breaker behaviour in frontmatter.
This module turns that description into a concrete retry schedule and a
circuit breaker a host can drive.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from plugin_host.config import Settings, get_settings
from plugin_host.contracts import (
    AgentFrontmatter,
    CircuitBreakerPolicy,
    Document,
    ErrorHandlingPolicy,
    RetryStrategy,
)
from plugin_host.observability import get_logger

logger = get_logger(__name__)


@dataclass
class RetrySchedule:
    """Delays before each retry attempt."""

    strategy: RetryStrategy = RetryStrategy.EXPONENTIAL_BACKOFF
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    backoff_factor: float = 2.0

    @classmethod
    def from_policy(cls, policy: ErrorHandlingPolicy) -> "RetrySchedule":
        return cls(
            strategy=policy.retry_strategy,
            max_retries=policy.max_retries,
            base_delay=policy.base_delay_seconds,
            max_delay=policy.max_delay_seconds,
            backoff_factor=policy.backoff_factor,
        )

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for given attempt (0-indexed)."""
        if self.strategy == RetryStrategy.NONE:
            return 0.0
        if self.strategy == RetryStrategy.FIXED:
            delay = self.base_delay
        elif self.strategy == RetryStrategy.LINEAR:
            delay = self.base_delay * (attempt + 1)
        else:
            delay = self.base_delay * (self.backoff_factor ** attempt)
        return min(delay, self.max_delay)

    def delays(self) -> list[float]:
        if self.strategy == RetryStrategy.NONE:
            return []
        return [self.get_delay(n) for n in range(self.max_retries)]


class BreakerState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreaker:
    """
    Consecutive-failure circuit breaker.

    closed -> open after ``failure_threshold`` failures in a row;
    open -> half_open once ``reset_timeout_seconds`` have passed;
    half_open -> closed on success, back to open on failure.
    """

    policy: CircuitBreakerPolicy = field(default_factory=CircuitBreakerPolicy)
    clock: Callable[[], float] = time.monotonic
    failures: int = 0
    opened_at: float | None = None
    _state: BreakerState = BreakerState.CLOSED

    @property
    def state(self) -> BreakerState:
        if (
            self._state == BreakerState.OPEN
            and self.opened_at is not None
            and self.clock() - self.opened_at >= self.policy.reset_timeout_seconds
        ):
            self._state = BreakerState.HALF_OPEN
        return self._state

    def allow_request(self) -> bool:
        return self.state != BreakerState.OPEN

    def record_success(self) -> None:
        self.failures = 0
        self.opened_at = None
        self._state = BreakerState.CLOSED

    def record_failure(self) -> None:
        if self.state == BreakerState.HALF_OPEN:
            self._trip()
            return
        self.failures += 1
        if self.failures >= self.policy.failure_threshold:
            self._trip()

    def _trip(self) -> None:
        self._state = BreakerState.OPEN
        self.opened_at = self.clock()
        logger.info(f"Circuit opened after {self.failures} consecutive failures")


def default_policy(settings: Settings | None = None) -> ErrorHandlingPolicy:
    """Policy applied to agents that declare no error_handling."""
    settings = settings or get_settings()
    return ErrorHandlingPolicy(
        max_retries=settings.default_max_retries,
        base_delay_seconds=settings.default_base_delay_seconds,
        max_delay_seconds=settings.default_max_delay_seconds,
    )


def effective_policy(document: Document, settings: Settings | None = None) -> ErrorHandlingPolicy:
    """The agent's declared policy, or the default one."""
    frontmatter = document.frontmatter
    if isinstance(frontmatter, AgentFrontmatter) and frontmatter.error_handling is not None:
        return frontmatter.error_handling
    return default_policy(settings)
