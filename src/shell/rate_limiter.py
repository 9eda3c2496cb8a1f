"""Request Rate Limiter - Imperative Shell.

Holds the per-client fixed windows between requests. The window
arithmetic is in src/core/rate_limit.py.
"""

import logging
import time
from collections.abc import Callable

from src.core.config import RateLimitConfig
from src.core.rate_limit import (
    RateLimitResult,
    RateLimitWindow,
    check_rate_limit,
    prune_expired_windows,
    record_request,
)


logger = logging.getLogger(__name__)


class RequestRateLimiter:
    """In-process rate limiter keyed by client (usually IP)."""

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config or RateLimitConfig()
        self._clock = clock
        self._windows: dict[str, RateLimitWindow] = {}
        self._last_prune = clock()

    def check(self, key: str) -> RateLimitResult:
        """Check and count a request for key."""
        now = self._clock()
        if now - self._last_prune > self.config.window_seconds:
            self.prune()

        window = self._windows.get(key)
        result = check_rate_limit(window, now, self.config)

        if result.allowed:
            self._windows[key] = record_request(window, now, self.config)
        else:
            logger.warning("Rate limit exceeded for %s", key)

        return result

    def prune(self) -> None:
        """Forget clients whose window has elapsed.

        Runs from check() at most once per window length.
        """
        now = self._clock()
        self._windows = prune_expired_windows(self._windows, now)
        self._last_prune = now
