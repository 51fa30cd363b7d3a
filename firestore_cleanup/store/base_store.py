"""
Remote store interface used by the enumerator and the batch deleter.
"""
from abc import ABC, abstractmethod
from typing import Optional


class RemoteStore(ABC):
    """
    Abstract hierarchical document store.

    Paths are slash-separated and relative to the database root, which is
    addressed as "". Implementations raise the errors defined in
    firestore_cleanup.errors (PermissionDeniedError, NotFoundError,
    TransientProviderError, FatalProviderError).
    """

    # Maximum number of documents accepted by one batch_delete() call
    max_batch_size: int = 500

    @abstractmethod
    def list_documents(
        self, collection_path: str, page_token: Optional[str] = None, page_size: int = 300
    ) -> tuple[list[str], Optional[str]]:
        """
        List one page of documents directly under a collection.

        Args:
            collection_path: Collection path
            page_token: Token returned by the previous page (None for the first page)
            page_size: Maximum documents in the page

        Returns:
            Tuple of (document paths, next page token or None when exhausted)
        """
        pass

    @abstractmethod
    def list_collection_ids(self, parent_path: str) -> list[str]:
        """
        List the ids of collections directly under a document or the root.

        Args:
            parent_path: Document path, or "" for the database root

        Returns:
            List of collection ids (not full paths)
        """
        pass

    @abstractmethod
    def batch_delete(self, document_paths: list[str]) -> list[str]:
        """
        Delete documents in one atomic request.

        Args:
            document_paths: At most max_batch_size document paths

        Returns:
            Paths the provider reported as deleted
        """
        pass

    def describe(self) -> str:
        """Human-readable target description for log and prompt messages."""
        return type(self).__name__
