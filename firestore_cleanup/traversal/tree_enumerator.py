"""
Tree enumerator producing the document paths a deletion run must remove.
"""
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Generator, Iterable, Optional

from config import settings
from firestore_cleanup.errors import NotFoundError
from firestore_cleanup.safety.retry_policy import RetryPolicy
from firestore_cleanup.scope.mode_resolver import DeletionMode
from firestore_cleanup.scope.path_classifier import join_path
from firestore_cleanup.store.base_store import RemoteStore
from firestore_cleanup.traversal.pagination import PaginationHandler
from firestore_cleanup.utils.logging import get_logger
from firestore_cleanup.utils.progress import DeletionProgress

logger = get_logger(__name__)

COLLECTION_UNIT = "collection"
DOCUMENT_UNIT = "document"


@dataclass(frozen=True)
class WorkUnit:
    """
    Pending piece of a recursive walk.

    A collection unit lists one page of documents starting at page_token.
    A document unit looks up the collections nested under one document.
    """

    kind: str
    path: str
    depth: int
    page_token: Optional[str] = None


class TreeEnumerator:
    """Walks a deletion scope and yields every document path to remove."""

    def __init__(
        self,
        store: RemoteStore,
        retry_policy: Optional[RetryPolicy] = None,
        page_size: Optional[int] = None,
        max_workers: Optional[int] = None,
        progress: Optional[DeletionProgress] = None,
        cancel_event: Optional[threading.Event] = None,
        logger_instance=None,
    ):
        """
        Initialize TreeEnumerator.

        Args:
            store: RemoteStore to walk
            retry_policy: RetryPolicy for listing calls
            page_size: Documents per listing page (defaults to settings.LIST_PAGE_SIZE)
            max_workers: Concurrent nested-collection lookups (defaults to settings.MAX_WORKERS)
            progress: DeletionProgress receiving enumeration counters
            cancel_event: Event checked between units; when set the walk stops
            logger_instance: Optional logger instance
        """
        self.store = store
        self.retry_policy = retry_policy or RetryPolicy()
        self.pagination_handler = PaginationHandler(store, self.retry_policy, page_size)
        self.max_workers = max_workers or settings.MAX_WORKERS
        self.progress = progress or DeletionProgress()
        self.cancel_event = cancel_event or threading.Event()
        self.logger = logger_instance or logger

    def enumerate(self, mode: DeletionMode, path: str = "") -> Generator[str, None, None]:
        """
        Generator over the document paths removed by a run.

        Finite and lazy; restarting means calling it again from the beginning.

        Args:
            mode: Resolved DeletionMode
            path: Target path (ignored for ALL_COLLECTIONS)

        Yields:
            Document paths
        """
        self.logger.info(f"Enumerating {mode.name} {path or '(all collections)'}")

        if mode == DeletionMode.SHALLOW_DOCUMENT:
            if not self._cancelled():
                yield self._emit(path)

        elif mode == DeletionMode.SHALLOW_COLLECTION:
            for documents in self.pagination_handler.iter_pages(path):
                for document_path in documents:
                    if self._cancelled():
                        return
                    yield self._emit(document_path)

        elif mode == DeletionMode.RECURSIVE_DOCUMENT:
            if self._cancelled():
                return
            yield self._emit(path)
            yield from self._walk([WorkUnit(DOCUMENT_UNIT, path, 0)])

        elif mode == DeletionMode.RECURSIVE_COLLECTION:
            yield from self._walk([WorkUnit(COLLECTION_UNIT, path, 0)])

        elif mode == DeletionMode.ALL_COLLECTIONS:
            collection_ids = self._nested_collection_ids("")
            self.logger.info(
                f"Deleting the following collections: {', '.join(collection_ids) or '(none)'}"
            )
            self.progress.increment("collections_discovered", len(collection_ids))
            yield from self._walk(
                [WorkUnit(COLLECTION_UNIT, collection_id, 0) for collection_id in collection_ids]
            )

        else:
            raise ValueError(f"Unsupported deletion mode: {mode!r}")

    def _walk(self, initial_units: Iterable[WorkUnit]) -> Generator[str, None, None]:
        """
        Process an explicit stack of work units.

        Collection units are processed one page at a time and re-pushed with
        the next page token, so held units stay bounded by page size times
        depth. Runs of document units are looked up concurrently.
        """
        stack = list(reversed(list(initial_units)))

        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="DiscoveryWorker"
        ) as executor:
            while stack:
                if self._cancelled():
                    self.logger.warning(f"Enumeration cancelled with {len(stack)} units pending")
                    return

                unit = stack.pop()

                if unit.kind == COLLECTION_UNIT:
                    documents, next_token = self.pagination_handler.fetch_page(
                        unit.path, unit.page_token
                    )
                    for document_path in documents:
                        if self._cancelled():
                            return
                        yield self._emit(document_path)

                    if next_token is not None:
                        stack.append(
                            WorkUnit(COLLECTION_UNIT, unit.path, unit.depth, next_token)
                        )
                    stack.extend(
                        WorkUnit(DOCUMENT_UNIT, document_path, unit.depth)
                        for document_path in reversed(documents)
                    )
                    continue

                group = [unit]
                while (
                    stack and stack[-1].kind == DOCUMENT_UNIT and len(group) < self.max_workers
                ):
                    group.append(stack.pop())

                results = list(
                    executor.map(self._nested_collection_ids, [u.path for u in group])
                )

                discovered = []
                for document_unit, collection_ids in zip(group, results):
                    for collection_id in collection_ids:
                        discovered.append(
                            WorkUnit(
                                COLLECTION_UNIT,
                                join_path(document_unit.path, collection_id),
                                document_unit.depth + 1,
                            )
                        )

                if discovered:
                    self.progress.increment("collections_discovered", len(discovered))
                    self.progress.record_depth(max(u.depth for u in discovered))
                    self.logger.debug(
                        f"Discovered {len(discovered)} nested collections: "
                        f"{', '.join(u.path for u in discovered[:5])}"
                        f"{' ...' if len(discovered) > 5 else ''}"
                    )
                stack.extend(reversed(discovered))

    def _nested_collection_ids(self, parent_path: str) -> list[str]:
        try:
            return self.retry_policy.call(
                self.store.list_collection_ids,
                parent_path,
                description=f"collection listing of {parent_path or '(root)'}",
                paths=[parent_path],
            )
        except NotFoundError:
            return []

    def _emit(self, document_path: str) -> str:
        self.progress.increment("documents_enumerated")
        return document_path

    def _cancelled(self) -> bool:
        return self.cancel_event.is_set()
