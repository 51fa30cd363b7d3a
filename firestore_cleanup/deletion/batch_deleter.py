"""
Batch deleter grouping document paths into provider-sized batches and
dispatching them through a bounded worker pool.
"""
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Generator, Iterable, Optional

from config import settings
from firestore_cleanup.errors import (
    BatchTooLargeError,
    NotFoundError,
    ProviderError,
)
from firestore_cleanup.safety.rate_limiter import RateLimiter
from firestore_cleanup.safety.retry_policy import RetryPolicy
from firestore_cleanup.store.base_store import RemoteStore
from firestore_cleanup.utils.logging import get_logger
from firestore_cleanup.utils.progress import DeletionProgress

logger = get_logger(__name__)


@dataclass
class DeletionOutcome:
    """Result of submitting a stream of document paths."""

    deleted_count: int = 0
    batches_sent: int = 0
    batches_succeeded: int = 0
    batches_failed: int = 0
    unresolved_paths: list[str] = field(default_factory=list)
    first_error: Optional[BaseException] = None
    cancelled: bool = False

    @property
    def success(self) -> bool:
        return self.first_error is None and not self.cancelled and not self.unresolved_paths


class BatchDeleter:
    """Deletes documents in batches with bounded concurrency, retry and backoff."""

    def __init__(
        self,
        store: RemoteStore,
        batch_size: Optional[int] = None,
        max_workers: Optional[int] = None,
        retry_policy: Optional[RetryPolicy] = None,
        rate_limiter: Optional[RateLimiter] = None,
        progress: Optional[DeletionProgress] = None,
        cancel_event: Optional[threading.Event] = None,
        progress_log_interval: Optional[int] = None,
        logger_instance=None,
    ):
        """
        Initialize BatchDeleter.

        Args:
            store: RemoteStore receiving batch deletes
            batch_size: Documents per batch (defaults to settings.DELETE_BATCH_SIZE,
                        capped at the store's max_batch_size)
            max_workers: Batches in flight at once (defaults to settings.MAX_WORKERS)
            retry_policy: RetryPolicy for batch commits
            rate_limiter: RateLimiter bounding documents deleted per second
            progress: DeletionProgress receiving batch counters
            cancel_event: Event checked between batch submissions
            progress_log_interval: Log progress every N completed batches
            logger_instance: Optional logger instance
        """
        self.store = store
        requested = batch_size or settings.DELETE_BATCH_SIZE
        self.batch_size = max(1, min(requested, store.max_batch_size))
        self.max_workers = max_workers or settings.MAX_WORKERS
        self.retry_policy = retry_policy or RetryPolicy()
        self.rate_limiter = rate_limiter or RateLimiter()
        self.progress = progress or DeletionProgress()
        self.cancel_event = cancel_event or threading.Event()
        self.progress_log_interval = progress_log_interval or settings.PROGRESS_LOG_INTERVAL
        self.logger = logger_instance or logger

        if requested > store.max_batch_size:
            self.logger.warning(
                f"Batch size {requested} exceeds provider maximum, "
                f"using {store.max_batch_size}"
            )

    def make_batches(self, references: Iterable[str]) -> Generator[list[str], None, None]:
        """
        Group paths into batches of at most batch_size, preserving order.

        Args:
            references: Iterable of document paths

        Yields:
            Lists of document paths
        """
        batch: list[str] = []
        for reference in references:
            batch.append(reference)
            if len(batch) >= self.batch_size:
                yield batch
                batch = []
        if batch:
            yield batch

    def submit(self, references: Iterable[str]) -> DeletionOutcome:
        """
        Delete every path in `references`.

        New batches stop being submitted after the first fatal error or on
        cancellation; batches already in flight are allowed to finish.

        Args:
            references: Iterable (typically a lazy generator) of document paths

        Returns:
            DeletionOutcome for the submitted paths
        """
        outcome = DeletionOutcome()
        in_flight: set[Future] = set()
        batches = self.make_batches(references)

        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="DeleteWorker"
        ) as executor:
            try:
                for batch in batches:
                    while len(in_flight) >= self.max_workers:
                        done, in_flight = wait(in_flight, return_when=FIRST_COMPLETED)
                        self._collect(done, outcome)

                    if outcome.first_error is not None:
                        outcome.unresolved_paths.extend(batch)
                        break

                    if self.cancel_event.is_set():
                        self.logger.warning("Cancellation requested, no new batches will be sent")
                        outcome.cancelled = True
                        outcome.unresolved_paths.extend(batch)
                        break

                    outcome.batches_sent += 1
                    self.progress.increment("batches_sent")
                    in_flight.add(executor.submit(self._delete_batch, batch))
            except Exception as e:
                # Enumeration failed: stop submitting, let in-flight batches drain
                self.logger.error(f"Enumeration failed, stopping batch submission: {e}")
                if outcome.first_error is None:
                    outcome.first_error = e
            finally:
                batches.close()
                done, _ = wait(in_flight)
                self._collect(done, outcome)

        if self.cancel_event.is_set():
            outcome.cancelled = True

        self.logger.info(
            f"Batch deletion finished: {outcome.deleted_count} deleted in "
            f"{outcome.batches_succeeded}/{outcome.batches_sent} batches"
        )
        return outcome

    def _collect(self, done: set, outcome: DeletionOutcome) -> None:
        """Fold finished batch futures into the outcome."""
        for future in done:
            batch, deleted, error = future.result()

            if error is None:
                outcome.batches_succeeded += 1
                outcome.deleted_count += deleted
                if outcome.batches_succeeded % self.progress_log_interval == 0:
                    self.progress.log_progress()
                continue

            outcome.batches_failed += 1
            outcome.unresolved_paths.extend(batch)
            if outcome.first_error is None:
                outcome.first_error = error
            self.logger.error(
                f"Batch of {len(batch)} documents failed ({error}); "
                f"first path: {batch[0]}"
            )

    def _delete_batch(self, batch: list[str]) -> tuple[list[str], int, Optional[ProviderError]]:
        """
        Worker body: delete one batch.

        Returns:
            Tuple of (batch, documents deleted, error or None)
        """
        try:
            deleted = self._commit(batch)
        except ProviderError as e:
            self.progress.increment("batches_failed")
            return batch, 0, e

        self.progress.increment("batches_succeeded")
        self.progress.increment("documents_deleted", deleted)
        return batch, deleted, None

    def _commit(self, batch: list[str]) -> int:
        """
        Commit a batch as a unit, splitting it when the provider says it is too large.

        Returns:
            Number of documents the provider reported as deleted

        Raises:
            ProviderError: Fatal failure (retry budget exhausted included)
        """
        self.rate_limiter.acquire(len(batch))

        try:
            deleted = self.retry_policy.call(
                self.store.batch_delete,
                batch,
                description=f"batch delete of {len(batch)} documents",
                paths=batch,
            )
        except NotFoundError:
            # Deleting something that is already gone is a no-op
            return 0
        except BatchTooLargeError:
            if len(batch) == 1:
                raise
            middle = len(batch) // 2
            self.logger.warning(
                f"Batch of {len(batch)} documents too large, retrying as "
                f"{middle} + {len(batch) - middle}"
            )
            return self._commit(batch[:middle]) + self._commit(batch[middle:])

        return len(deleted)
