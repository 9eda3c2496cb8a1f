"""Tests for the in-process request rate limiter."""

from src.core.config import RateLimitConfig
from src.shell.rate_limiter import RequestRateLimiter


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestRequestRateLimiter:
    """Tests for RequestRateLimiter.check()."""

    def test_allows_up_to_limit(self):
        """The first max_requests requests are allowed."""
        limiter = RequestRateLimiter(RateLimitConfig(max_requests=2), clock=FakeClock())

        assert limiter.check("1.2.3.4").allowed is True
        assert limiter.check("1.2.3.4").allowed is True
        assert limiter.check("1.2.3.4").allowed is False

    def test_remaining_counts_down(self):
        """Remaining decreases with each request."""
        limiter = RequestRateLimiter(RateLimitConfig(max_requests=3), clock=FakeClock())

        assert [limiter.check("ip").remaining for _ in range(4)] == [2, 1, 0, 0]

    def test_keys_are_independent(self):
        """Each client has its own window."""
        limiter = RequestRateLimiter(RateLimitConfig(max_requests=1), clock=FakeClock())

        assert limiter.check("a").allowed is True
        assert limiter.check("b").allowed is True
        assert limiter.check("a").allowed is False

    def test_window_resets(self):
        """Requests are allowed again after the window elapses."""
        clock = FakeClock()
        limiter = RequestRateLimiter(
            RateLimitConfig(max_requests=1, window_seconds=60),
            clock=clock,
        )

        limiter.check("ip")
        assert limiter.check("ip").allowed is False

        clock.now += 61
        assert limiter.check("ip").allowed is True

    def test_prune_forgets_elapsed_windows(self):
        """Pruned clients start over."""
        clock = FakeClock()
        limiter = RequestRateLimiter(
            RateLimitConfig(max_requests=1, window_seconds=60),
            clock=clock,
        )
        limiter.check("ip")
        clock.now += 61

        limiter.prune()

        assert limiter._windows == {}

    def test_check_evicts_elapsed_windows(self):
        """Clients seen once do not accumulate across windows."""
        clock = FakeClock()
        limiter = RequestRateLimiter(
            RateLimitConfig(max_requests=10, window_seconds=60),
            clock=clock,
        )

        for i in range(1000):
            limiter.check(f"203.0.113.{i}")
            clock.now += 120

        assert len(limiter._windows) == 1

    def test_check_keeps_active_windows(self):
        """Automatic pruning does not reset clients still in their window."""
        clock = FakeClock()
        limiter = RequestRateLimiter(
            RateLimitConfig(max_requests=2, window_seconds=60),
            clock=clock,
        )
        limiter.check("busy")
        limiter.check("busy")

        clock.now += 30
        limiter.check("other")
        clock.now += 29
        limiter._last_prune -= 120

        assert limiter.check("busy").allowed is False
