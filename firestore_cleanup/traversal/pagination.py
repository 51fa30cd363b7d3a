"""
Pagination handler for listing documents a page at a time.
"""
from typing import Generator, Optional

from config import settings
from firestore_cleanup.errors import NotFoundError
from firestore_cleanup.safety.retry_policy import RetryPolicy
from firestore_cleanup.store.base_store import RemoteStore
from firestore_cleanup.utils.logging import get_logger

logger = get_logger(__name__)


class PaginationHandler:
    """Pages through a collection's documents with local retries."""

    def __init__(
        self,
        store: RemoteStore,
        retry_policy: Optional[RetryPolicy] = None,
        page_size: Optional[int] = None,
    ):
        """
        Initialize PaginationHandler.

        Args:
            store: RemoteStore to list from
            retry_policy: RetryPolicy for listing calls
            page_size: Documents per page (defaults to settings.LIST_PAGE_SIZE)
        """
        self.store = store
        self.retry_policy = retry_policy or RetryPolicy()
        self.page_size = page_size or settings.LIST_PAGE_SIZE

    def fetch_page(
        self, collection_path: str, page_token: Optional[str] = None
    ) -> tuple[list[str], Optional[str]]:
        """
        Fetch one page of document paths.

        A missing collection is an empty, final page.

        Args:
            collection_path: Collection to list
            page_token: Cursor from the previous page

        Returns:
            Tuple of (document paths, next page token or None)
        """
        try:
            documents, next_token = self.retry_policy.call(
                self.store.list_documents,
                collection_path,
                page_token=page_token,
                page_size=self.page_size,
                description=f"document listing of {collection_path}",
                paths=[collection_path],
            )
        except NotFoundError:
            logger.debug(f"Collection {collection_path} not found, treating as empty")
            return [], None

        if not documents:
            # No documents means no further pages, whatever the token says
            return [], None

        return documents, next_token

    def iter_pages(self, collection_path: str) -> Generator[list[str], None, None]:
        """
        Generator over every page of a collection.

        Args:
            collection_path: Collection to list

        Yields:
            Lists of document paths, one per page
        """
        page_token = None
        page_number = 0

        while True:
            documents, page_token = self.fetch_page(collection_path, page_token)
            if not documents:
                break

            page_number += 1
            logger.debug(
                f"Page {page_number} of {collection_path}: {len(documents)} documents"
            )
            yield documents

            if page_token is None:
                break
