"""
Mode resolver combining the target scope and the recursive/shallow flags.
"""
from enum import Enum
from typing import Optional

from firestore_cleanup.errors import NotFoundError, UsageError
from firestore_cleanup.safety.retry_policy import RetryPolicy
from firestore_cleanup.scope.path_classifier import (
    AllCollectionsScope,
    CollectionScope,
    DocumentScope,
    Scope,
)
from firestore_cleanup.store.base_store import RemoteStore
from firestore_cleanup.utils.logging import get_logger

logger = get_logger(__name__)


class DeletionMode(Enum):
    """How a deletion run treats the target and its descendants."""

    SHALLOW_DOCUMENT = "shallow_document"
    RECURSIVE_DOCUMENT = "recursive_document"
    SHALLOW_COLLECTION = "shallow_collection"
    RECURSIVE_COLLECTION = "recursive_collection"
    ALL_COLLECTIONS = "all_collections"

    @property
    def is_recursive(self) -> bool:
        return self in (
            DeletionMode.RECURSIVE_DOCUMENT,
            DeletionMode.RECURSIVE_COLLECTION,
            DeletionMode.ALL_COLLECTIONS,
        )


_DECISION_TABLE = {
    (DocumentScope, True): DeletionMode.RECURSIVE_DOCUMENT,
    (DocumentScope, False): DeletionMode.SHALLOW_DOCUMENT,
    (CollectionScope, True): DeletionMode.RECURSIVE_COLLECTION,
    (CollectionScope, False): DeletionMode.SHALLOW_COLLECTION,
}


def preview_mode(
    scope: Scope, recursive: bool = False, shallow: bool = False, logger_instance=None
) -> DeletionMode:
    """
    Derive the mode from the scope and flags alone, without touching the store.

    A collection needs an explicit flag. An unflagged document previews as
    shallow; ModeResolver.resolve still rejects it if it has subcollections.

    Raises:
        UsageError: Both flags set, unflagged collection, or an unsupported scope
    """
    log = logger_instance or logger

    if recursive and shallow:
        raise UsageError("Cannot pass recursive and shallow options together.")

    if isinstance(scope, AllCollectionsScope):
        if scope.path or recursive or shallow:
            log.warning("Deleting all collections, the path and recursive/shallow flags are ignored")
        return DeletionMode.ALL_COLLECTIONS

    if isinstance(scope, CollectionScope) and not (recursive or shallow):
        raise UsageError("Must pass recursive or shallow option when deleting a collection.")

    key = (type(scope), bool(recursive))
    if key not in _DECISION_TABLE:
        raise UsageError(f"Unsupported deletion target: {scope!r}")
    return _DECISION_TABLE[key]


class ModeResolver:
    """
    Resolves one DeletionMode per run, before any deletion is issued.

    When no flag is given on a document the resolver lists the document's
    subcollections once. If any exist the request is ambiguous and is
    rejected, since a shallow delete would orphan them.
    """

    def __init__(
        self,
        store: RemoteStore,
        retry_policy: Optional[RetryPolicy] = None,
        logger_instance=None,
    ):
        """
        Initialize ModeResolver.

        Args:
            store: RemoteStore used for the subcollection check
            retry_policy: RetryPolicy for store calls
            logger_instance: Optional logger instance
        """
        self.store = store
        self.retry_policy = retry_policy or RetryPolicy()
        self.logger = logger_instance or logger

    def resolve(self, scope: Scope, recursive: bool = False, shallow: bool = False) -> DeletionMode:
        """
        Resolve the deletion mode for a scope.

        Args:
            scope: DocumentScope, CollectionScope or AllCollectionsScope
            recursive: Delete all descendants too
            shallow: Delete only the top-level documents of the scope

        Returns:
            DeletionMode for the whole run

        Raises:
            UsageError: Both flags set, unflagged collection, or unflagged
                        document with subcollections
        """
        mode = preview_mode(scope, recursive=recursive, shallow=shallow, logger_instance=self.logger)

        if mode == DeletionMode.ALL_COLLECTIONS or recursive or shallow:
            self.logger.debug(f"Resolved {scope.path or '(all collections)'} to {mode.name}")
            return mode

        if self._subcollection_ids(scope.path):
            raise UsageError(
                f"Document {scope.path} has subcollections. "
                "Pass recursive to delete them too, or shallow to leave them orphaned."
            )

        self.logger.debug(f"No subcollections under {scope.path}, resolved to {mode.name}")
        return mode

    def _subcollection_ids(self, document_path: str) -> list[str]:
        try:
            return self.retry_policy.call(
                self.store.list_collection_ids,
                document_path,
                description=f"collection listing of {document_path}",
                paths=[document_path],
            )
        except NotFoundError:
            return []
