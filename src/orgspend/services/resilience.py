"""Simulated network behavior wrapped around every query.

Each call is delayed, counted against a sliding rate-limit window, and,
when error simulation is enabled, may fail with a synthetic HTTP error.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections import deque
from collections.abc import Awaitable, Callable
from typing import TypeVar

from result import Err, Result

from orgspend.data.random_source import RandomSource, uniform
from orgspend.models.errors import (
    BAD_REQUEST,
    FORBIDDEN,
    INTERNAL_SERVER_ERROR,
    NOT_FOUND,
    TOO_MANY_REQUESTS,
    UNAUTHORIZED,
    ApiError,
    rate_limited,
    simulated_error,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)

# Share of injected errors per status; cumulative draw, 500 as fallback.
ERROR_DISTRIBUTION: tuple[tuple[int, float], ...] = (
    (BAD_REQUEST, 0.2),
    (UNAUTHORIZED, 0.1),
    (FORBIDDEN, 0.1),
    (NOT_FOUND, 0.2),
    (TOO_MANY_REQUESTS, 0.1),
    (INTERNAL_SERVER_ERROR, 0.3),
)


class RequestSimulator:
    """Latency, rate limiting and error injection for in-process queries."""

    def __init__(
        self,
        *,
        latency_min_ms: int = 50,
        latency_max_ms: int = 250,
        rate_limit_requests: int = 100,
        rate_limit_window_s: float = 60.0,
        error_rate: float = 0.1,
        error_simulation: bool = False,
        rng: RandomSource | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._latency = (latency_min_ms, latency_max_ms)
        self._max_requests = rate_limit_requests
        self._window_s = rate_limit_window_s
        self._error_rate = _clamp(error_rate)
        self._error_simulation = error_simulation
        self._rng = rng if rng is not None else random.Random()
        self._clock = clock
        self._sleep = sleep
        self._requests: deque[float] = deque()

    @property
    def error_rate(self) -> float:
        return self._error_rate

    @property
    def error_simulation_enabled(self) -> bool:
        return self._error_simulation

    def enable_error_simulation(self, enabled: bool = True) -> None:
        self._error_simulation = enabled

    def set_error_rate(self, rate: float) -> None:
        self._error_rate = _clamp(rate)

    async def delay(self) -> None:
        low, high = self._latency
        if high <= 0:
            return
        delay_ms = uniform(self._rng, low, high)
        logger.debug("Simulating %.0f ms latency", delay_ms)
        await self._sleep(delay_ms / 1000)

    def check_rate_limit(self) -> ApiError | None:
        """Record one request; the error when the window is already full."""
        now = self._clock()
        cutoff = now - self._window_s
        while self._requests and self._requests[0] <= cutoff:
            self._requests.popleft()
        if len(self._requests) >= self._max_requests:
            logger.warning(
                "Rate limit exceeded: %d requests in %.0f s", len(self._requests), self._window_s
            )
            return rate_limited()
        self._requests.append(now)
        return None

    def draw_error(self) -> ApiError | None:
        if not self._error_simulation or self._rng.random() >= self._error_rate:
            return None
        draw = self._rng.random()
        cumulative = 0.0
        status = INTERNAL_SERVER_ERROR
        for candidate, share in ERROR_DISTRIBUTION:
            cumulative += share
            if draw <= cumulative:
                status = candidate
                break
        logger.warning("Injecting simulated %d error", status)
        return simulated_error(status)

    async def run(self, operation: Callable[[], Result[T, ApiError]]) -> Result[T, ApiError]:
        """Apply delay, rate limit and error injection, then ``operation``."""
        await self.delay()
        if (error := self.check_rate_limit()) is not None:
            return Err(error)
        if (error := self.draw_error()) is not None:
            return Err(error)
        return operation()


def _clamp(rate: float) -> float:
    return max(0.0, min(1.0, rate))
