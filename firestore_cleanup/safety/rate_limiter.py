"""
Rate limiter to enforce a maximum document deletion rate per second.
"""
import threading
import time
from collections import deque
from typing import Callable, Optional

from config import settings
from firestore_cleanup.utils.logging import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """Sliding-window limiter shared by all batch workers."""

    def __init__(
        self,
        max_per_second: Optional[int] = None,
        window_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize RateLimiter.

        Args:
            max_per_second: Maximum documents deleted per window (defaults to settings.MAX_DELETES_PER_SECOND)
            window_seconds: Window length in seconds
            clock: Monotonic clock (injectable for tests)
            sleep: Sleep function (injectable for tests)
        """
        self.max_per_second = max_per_second or settings.MAX_DELETES_PER_SECOND
        self.window_seconds = window_seconds
        self.clock = clock
        self.sleep = sleep

        # (timestamp, count) entries inside the current window
        self.action_times: deque = deque()
        self.deleted_count = 0
        self._lock = threading.Lock()

        logger.debug(
            f"RateLimiter initialized: max_per_second={self.max_per_second}, "
            f"window={self.window_seconds}s"
        )

    def _prune(self, now: float) -> int:
        cutoff = now - self.window_seconds
        while self.action_times and self.action_times[0][0] <= cutoff:
            self.action_times.popleft()
        return sum(count for _, count in self.action_times)

    def acquire(self, count: int = 1) -> float:
        """
        Block until `count` deletions fit in the window, then record them.

        Args:
            count: Number of documents about to be deleted

        Returns:
            Total seconds spent waiting
        """
        waited = 0.0
        while True:
            with self._lock:
                now = self.clock()
                current = self._prune(now)
                # A single oversized request is always allowed into an empty window
                if current == 0 or current + count <= self.max_per_second:
                    self.action_times.append((now, count))
                    self.deleted_count += count
                    return waited
                wait_time = max(self.action_times[0][0] + self.window_seconds - now, 0.001)

            logger.debug(
                f"Rate limit reached ({current}/{self.max_per_second} per "
                f"{self.window_seconds}s), waiting {wait_time:.3f}s"
            )
            self.sleep(wait_time)
            waited += wait_time

    def get_stats(self) -> dict:
        """
        Get current rate limiter statistics.

        Returns:
            Dictionary with statistics
        """
        with self._lock:
            current = self._prune(self.clock())
            return {
                "max_per_second": self.max_per_second,
                "actions_in_window": current,
                "total_actions": self.deleted_count,
                "window_seconds": self.window_seconds,
            }

    def reset(self) -> None:
        """Reset action tracking (useful for testing)."""
        with self._lock:
            self.action_times.clear()
            self.deleted_count = 0
        logger.debug("Rate limiter reset")
