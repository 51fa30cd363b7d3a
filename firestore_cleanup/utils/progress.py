"""
Progress counters and reporting for deletion runs.
"""
import threading
from datetime import datetime
from typing import Any, Dict, Optional

from firestore_cleanup.utils.logging import get_logger

logger = get_logger(__name__)


class DeletionProgress:
    """Running counters shared by enumeration and batch workers."""

    COUNTERS = (
        "documents_enumerated",
        "documents_deleted",
        "collections_discovered",
        "batches_sent",
        "batches_succeeded",
        "batches_failed",
        "retries",
        "max_depth",
    )

    def __init__(self, start_time: Optional[datetime] = None):
        """
        Initialize DeletionProgress.

        Args:
            start_time: Run start time (defaults to now)
        """
        self.start_time = start_time or datetime.now()
        self.stats = {name: 0 for name in self.COUNTERS}
        self._lock = threading.Lock()

    def increment(self, counter: str, amount: int = 1) -> None:
        """
        Atomically add to a counter.

        Args:
            counter: Counter name (one of COUNTERS)
            amount: Value to add
        """
        if counter not in self.stats:
            raise KeyError(f"Unknown progress counter: {counter}")
        with self._lock:
            self.stats[counter] += amount

    def record_depth(self, depth: int) -> None:
        with self._lock:
            if depth > self.stats["max_depth"]:
                self.stats["max_depth"] = depth

    def __getitem__(self, counter: str) -> int:
        with self._lock:
            return self.stats[counter]

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return dict(self.stats)

    def deletion_rate(self) -> float:
        """Documents deleted per second since start."""
        elapsed = (datetime.now() - self.start_time).total_seconds()
        return self["documents_deleted"] / max(elapsed, 0.001)

    def log_progress(self) -> None:
        stats = self.snapshot()
        logger.info(
            f"Progress: {stats['documents_deleted']} deleted, "
            f"{stats['documents_enumerated']} enumerated, "
            f"{stats['batches_succeeded']}/{stats['batches_sent']} batches ok "
            f"({self.deletion_rate():.1f} docs/s)"
        )

    def print_summary(self) -> None:
        """Print final summary statistics."""
        stats = self.snapshot()
        elapsed = datetime.now() - self.start_time

        logger.info("=" * 60)
        logger.info("DELETION SUMMARY")
        logger.info("=" * 60)
        logger.info(f"Documents Enumerated: {stats['documents_enumerated']}")
        logger.info(f"Documents Deleted: {stats['documents_deleted']}")
        logger.info(f"Collections Discovered: {stats['collections_discovered']}")
        logger.info(f"Max Depth: {stats['max_depth']}")
        logger.info(f"Batches Sent: {stats['batches_sent']}")
        logger.info(f"  - Succeeded: {stats['batches_succeeded']}")
        logger.info(f"  - Failed: {stats['batches_failed']}")
        logger.info(f"Retries: {stats['retries']}")
        logger.info(f"Time Elapsed: {elapsed}")
        logger.info(f"Average Rate: {self.deletion_rate():.1f} docs/s")
        logger.info("=" * 60)

    def generate_report(self, target: Optional[str] = None) -> str:
        """
        Generate text report.

        Args:
            target: Optional description of the deleted scope

        Returns:
            Formatted report string
        """
        stats = self.snapshot()
        elapsed = datetime.now() - self.start_time

        report_lines = [
            "Firestore Delete Report",
            "=" * 60,
            f"Start Time: {self.start_time.strftime('%Y-%m-%d %H:%M:%S')}",
            f"End Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            f"Duration: {elapsed}",
        ]

        if target:
            report_lines.append(f"Target: {target}")

        report_lines.extend(
            [
                "",
                "Statistics:",
                f"  Documents Enumerated: {stats['documents_enumerated']}",
                f"  Documents Deleted: {stats['documents_deleted']}",
                f"  Collections Discovered: {stats['collections_discovered']}",
                f"  Batches: {stats['batches_sent']} sent, "
                f"{stats['batches_succeeded']} succeeded, {stats['batches_failed']} failed",
                f"  Retries: {stats['retries']}",
                "",
                f"Average Rate: {self.deletion_rate():.1f} docs/s",
                "=" * 60,
            ]
        )

        return "\n".join(report_lines)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get current statistics.

        Returns:
            Statistics dictionary
        """
        elapsed = datetime.now() - self.start_time
        return {
            **self.snapshot(),
            "start_time": self.start_time.isoformat(),
            "elapsed_time": str(elapsed),
            "elapsed_seconds": elapsed.total_seconds(),
        }
