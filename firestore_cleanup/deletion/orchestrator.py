"""
Deletion orchestrator: resolves the mode, drives enumeration into the batch
deleter and reports the outcome of a run.
"""
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from config import settings
from firestore_cleanup.deletion.batch_deleter import BatchDeleter
from firestore_cleanup.errors import DeletionCancelledError, DeletionError
from firestore_cleanup.safety.rate_limiter import RateLimiter
from firestore_cleanup.safety.retry_policy import RetryPolicy
from firestore_cleanup.scope.mode_resolver import DeletionMode, ModeResolver
from firestore_cleanup.scope.path_classifier import AllCollectionsScope, Scope
from firestore_cleanup.store.base_store import RemoteStore
from firestore_cleanup.traversal.tree_enumerator import TreeEnumerator
from firestore_cleanup.utils.logging import get_logger
from firestore_cleanup.utils.progress import DeletionProgress

logger = get_logger(__name__)


@dataclass
class DeletionResult:
    """Summary of one deletion run."""

    mode: DeletionMode
    path: str
    deleted_count: int
    documents_enumerated: int
    batches_sent: int
    batches_succeeded: int
    batches_failed: int
    stats: Dict[str, Any] = field(default_factory=dict)


class DeletionOrchestrator:
    """Top-level coordinator for one deletion request."""

    def __init__(
        self,
        store: RemoteStore,
        batch_size: Optional[int] = None,
        max_workers: Optional[int] = None,
        page_size: Optional[int] = None,
        retry_policy: Optional[RetryPolicy] = None,
        rate_limiter: Optional[RateLimiter] = None,
        logger_instance=None,
    ):
        """
        Initialize DeletionOrchestrator.

        Args:
            store: RemoteStore holding the data
            batch_size: Documents per delete batch (defaults to settings.DELETE_BATCH_SIZE)
            max_workers: Worker pool size for discovery and deletion (defaults to settings.MAX_WORKERS)
            page_size: Documents per listing page (defaults to settings.LIST_PAGE_SIZE)
            retry_policy: RetryPolicy shared by all store calls
            rate_limiter: RateLimiter shared by all batch workers
            logger_instance: Optional logger instance
        """
        self.store = store
        self.batch_size = batch_size or settings.DELETE_BATCH_SIZE
        self.max_workers = max_workers or settings.MAX_WORKERS
        self.page_size = page_size or settings.LIST_PAGE_SIZE
        self.retry_policy = retry_policy or RetryPolicy()
        self.rate_limiter = rate_limiter or RateLimiter()
        self.logger = logger_instance or logger

        self.cancel_event = threading.Event()
        self.progress: Optional[DeletionProgress] = None
        self.mode_resolver = ModeResolver(store, self.retry_policy, logger_instance=self.logger)

    def cancel(self) -> None:
        """Stop issuing new work. In-flight batches still finish."""
        if not self.cancel_event.is_set():
            self.logger.warning("Cancellation requested")
        self.cancel_event.set()

    def resolve_mode(
        self, scope: Scope, recursive: bool = False, shallow: bool = False
    ) -> DeletionMode:
        """
        Resolve the run's DeletionMode without deleting anything.

        Raises:
            UsageError: Conflicting flags, unflagged collection, or unflagged document with subcollections
        """
        return self.mode_resolver.resolve(scope, recursive=recursive, shallow=shallow)

    def execute(
        self,
        scope: Scope,
        recursive: bool = False,
        shallow: bool = False,
        mode: Optional[DeletionMode] = None,
    ) -> DeletionResult:
        """
        Delete a scope.

        Args:
            scope: DocumentScope, CollectionScope or AllCollectionsScope
            recursive: Delete all descendants too
            shallow: Delete only the scope's top-level documents
            mode: Already-resolved mode (skips resolution; used after a confirmation prompt)

        Returns:
            DeletionResult when every enumerated document was deleted

        Raises:
            UsageError: Flags conflict or the target is ambiguous (nothing deleted)
            DeletionCancelledError: The run was cancelled part way
            DeletionError: A fatal error stopped the run; carries the cause and unresolved paths
        """
        if mode is None:
            mode = self.resolve_mode(scope, recursive=recursive, shallow=shallow)

        path = "" if mode == DeletionMode.ALL_COLLECTIONS else scope.path

        self.progress = DeletionProgress()
        progress = self.progress
        self.retry_policy.on_retry = lambda retry_number, error: progress.increment("retries")

        enumerator = TreeEnumerator(
            self.store,
            retry_policy=self.retry_policy,
            page_size=self.page_size,
            max_workers=self.max_workers,
            progress=progress,
            cancel_event=self.cancel_event,
            logger_instance=self.logger,
        )
        deleter = BatchDeleter(
            self.store,
            batch_size=self.batch_size,
            max_workers=self.max_workers,
            retry_policy=self.retry_policy,
            rate_limiter=self.rate_limiter,
            progress=progress,
            cancel_event=self.cancel_event,
            logger_instance=self.logger,
        )

        self.logger.info(f"Starting {mode.name} delete of {path or self.store.describe()}")

        references = enumerator.enumerate(mode, path)
        try:
            outcome = deleter.submit(references)
        finally:
            references.close()

        stats = progress.get_stats()
        result = DeletionResult(
            mode=mode,
            path=path,
            deleted_count=outcome.deleted_count,
            documents_enumerated=stats["documents_enumerated"],
            batches_sent=outcome.batches_sent,
            batches_succeeded=outcome.batches_succeeded,
            batches_failed=outcome.batches_failed,
            stats=stats,
        )
        progress.print_summary()
        self.logger.debug(progress.generate_report(target=path or self.store.describe()))

        if outcome.first_error is not None:
            self._log_unresolved(outcome.unresolved_paths)
            raise DeletionError(
                f"Deletion of {path or 'all collections'} failed: {outcome.first_error}",
                cause=outcome.first_error,
                unresolved_paths=outcome.unresolved_paths,
                result=result,
            )

        if outcome.cancelled:
            self._log_unresolved(outcome.unresolved_paths)
            raise DeletionCancelledError(
                f"Deletion of {path or 'all collections'} cancelled after "
                f"{outcome.deleted_count} documents",
                unresolved_paths=outcome.unresolved_paths,
                result=result,
            )

        self.logger.info(
            f"Deleted {result.deleted_count} documents "
            f"({result.documents_enumerated} enumerated) from {path or 'all collections'}"
        )
        return result

    def delete_database(self) -> DeletionResult:
        """Recursively delete every top-level collection."""
        return self.execute(AllCollectionsScope(), mode=DeletionMode.ALL_COLLECTIONS)

    def _log_unresolved(self, unresolved_paths: list[str]) -> None:
        if not unresolved_paths:
            return
        self.logger.error(f"{len(unresolved_paths)} documents were not deleted, for example:")
        for unresolved in unresolved_paths[:10]:
            self.logger.error(f"  {unresolved}")
