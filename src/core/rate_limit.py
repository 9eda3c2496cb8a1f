"""Rate limiting logic - Pure functions.

This module handles fixed-window rate limiting of verification requests
per client key (usually the client IP). All functions are pure with no
side effects; the shell keeps the windows between requests.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.core.config import RateLimitConfig


@dataclass(frozen=True)
class RateLimitWindow:
    """Request count for one client in the current window.

    Attributes:
        count: Requests seen in this window
        reset_at: Epoch seconds when the window ends
    """
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitResult:
    """Result of checking rate limits.

    Attributes:
        allowed: Whether the request is allowed
        limit: Maximum requests per window
        remaining: Requests left in the window after this one
        reset_at: Epoch seconds when the window ends
    """
    allowed: bool
    limit: int
    remaining: int
    reset_at: float


def _is_window_active(window: RateLimitWindow | None, now: float) -> bool:
    return window is not None and now <= window.reset_at


def check_rate_limit(
    window: RateLimitWindow | None,
    now: float,
    config: "RateLimitConfig",
) -> RateLimitResult:
    """Check if a request is allowed under the rate limit.

    Pure function. A missing or elapsed window starts fresh.

    Args:
        window: The client's current window (None if never seen)
        now: Current time in epoch seconds
        config: Rate limit configuration

    Returns:
        RateLimitResult indicating if the request is allowed
    """
    if not _is_window_active(window, now):
        return RateLimitResult(
            allowed=True,
            limit=config.max_requests,
            remaining=config.max_requests - 1,
            reset_at=now + config.window_seconds,
        )

    if window.count >= config.max_requests:
        return RateLimitResult(
            allowed=False,
            limit=config.max_requests,
            remaining=0,
            reset_at=window.reset_at,
        )

    return RateLimitResult(
        allowed=True,
        limit=config.max_requests,
        remaining=config.max_requests - window.count - 1,
        reset_at=window.reset_at,
    )


def record_request(
    window: RateLimitWindow | None,
    now: float,
    config: "RateLimitConfig",
) -> RateLimitWindow:
    """Record a request and return the updated window.

    Pure function - returns a new window without modifying input.
    """
    if not _is_window_active(window, now):
        return RateLimitWindow(count=1, reset_at=now + config.window_seconds)

    return RateLimitWindow(count=window.count + 1, reset_at=window.reset_at)


def prune_expired_windows(
    windows: Mapping[str, RateLimitWindow],
    now: float,
) -> dict[str, RateLimitWindow]:
    """Drop windows that have elapsed.

    Pure function.
    """
    return {key: w for key, w in windows.items() if _is_window_active(w, now)}


def rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    """Build X-RateLimit-* response headers.

    Pure function.
    """
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(max(result.remaining, 0)),
        "X-RateLimit-Reset": str(int(result.reset_at)),
    }
