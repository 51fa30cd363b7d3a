"""
Tests for rate limiter.
"""
import pytest

from firestore_cleanup.safety.rate_limiter import RateLimiter


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.now += seconds


@pytest.mark.unit
class TestRateLimiter:
    """Test RateLimiter."""

    def test_under_limit_does_not_wait(self):
        """Test acquiring within the limit returns immediately."""
        clock = FakeClock()
        limiter = RateLimiter(max_per_second=10, clock=clock, sleep=clock.sleep)

        assert limiter.acquire(4) == 0.0
        assert limiter.acquire(6) == 0.0
        assert limiter.get_stats()["actions_in_window"] == 10

    def test_over_limit_waits_for_window(self):
        """Test exceeding the limit waits until the window slides."""
        clock = FakeClock()
        limiter = RateLimiter(max_per_second=10, clock=clock, sleep=clock.sleep)

        limiter.acquire(8)
        waited = limiter.acquire(5)

        assert waited == pytest.approx(1.0)
        assert limiter.get_stats()["total_actions"] == 13

    def test_oversized_request_admitted_into_empty_window(self):
        """Test a single request larger than the limit is not blocked forever."""
        clock = FakeClock()
        limiter = RateLimiter(max_per_second=10, clock=clock, sleep=clock.sleep)

        assert limiter.acquire(50) == 0.0

    def test_reset(self):
        """Test reset() clears the window and totals."""
        limiter = RateLimiter(max_per_second=5)
        limiter.acquire(3)

        limiter.reset()

        stats = limiter.get_stats()
        assert stats["actions_in_window"] == 0
        assert stats["total_actions"] == 0
