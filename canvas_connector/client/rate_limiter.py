"""Minimum-spacing rate limiting for Canvas API calls."""

import asyncio
import random
import time
from typing import Optional

from ..config import RateLimitConfig
from ..models.results import RequestStats
from ..utils.logging_config import get_logger

logger = get_logger()


class RateLimiter:
    """Spaces request admissions at least ``min_interval_seconds`` apart.

    Admission slots are reserved before the caller suspends, so coroutines
    waiting concurrently on one event loop are still spaced correctly
    without a lock.
    """

    def __init__(self, config: Optional[RateLimitConfig] = None):
        self.config = config or RateLimitConfig()
        self._last_request_time: float = 0
        self._request_count: int = 0

    async def acquire(self) -> float:
        """
        Wait until the next request may be sent.

        Returns:
            Admission time (epoch seconds) reserved for this request
        """
        now = time.time()
        admitted_at = max(now, self._last_request_time + self.config.min_interval_seconds)

        # Reserve the slot before suspending
        self._last_request_time = admitted_at
        self._request_count += 1

        delay = admitted_at - now
        if delay > 0:
            logger.debug(f"Rate limiting: sleeping {delay:.3f}s")
            await asyncio.sleep(delay)

        return admitted_at

    def backoff(self, attempt: int) -> float:
        """Jittered exponential delay in seconds before retry number ``attempt`` (from 0)."""
        cfg = self.config
        base = cfg.backoff_base_seconds * cfg.backoff_factor ** attempt
        return min(base * random.uniform(0.5, 1.5), cfg.max_backoff_seconds)

    def reset(self) -> None:
        """Forget previous admissions and the request counter."""
        self._last_request_time = 0
        self._request_count = 0

    def stats(self) -> RequestStats:
        """Snapshot of the request counter and last admission time."""
        return RequestStats(
            request_count=self._request_count,
            last_request_time=self._last_request_time,
        )

    @property
    def request_count(self) -> int:
        """Requests admitted so far."""
        return self._request_count
