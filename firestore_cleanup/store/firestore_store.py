"""
Cloud Firestore implementation of the remote store.
"""
import itertools
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from google.cloud import firestore
from google.oauth2 import service_account

from config import settings
from firestore_cleanup.errors import ProviderError
from firestore_cleanup.safety.error_classifier import ErrorClassifier
from firestore_cleanup.store.base_store import RemoteStore
from firestore_cleanup.utils.logging import get_logger

logger = get_logger(__name__)


def create_client(
    project: Optional[str] = None,
    database: Optional[str] = None,
    credentials_path: Optional[str] = None,
) -> firestore.Client:
    """
    Create a Firestore client.

    Uses a service account file when one is given, Application Default
    Credentials otherwise. When FIRESTORE_EMULATOR_HOST is set the client
    library connects to the emulator instead of production.

    Args:
        project: Project id (defaults to settings.FIRESTORE_PROJECT, then the credentials' project)
        database: Database id (defaults to settings.FIRESTORE_DATABASE)
        credentials_path: Service account JSON path (defaults to settings.CREDENTIALS_PATH)

    Returns:
        firestore.Client instance
    """
    project = project or settings.FIRESTORE_PROJECT or None
    database = database or settings.FIRESTORE_DATABASE
    credentials_path = credentials_path or settings.CREDENTIALS_PATH or None

    kwargs = {"database": database}

    if credentials_path:
        credentials = service_account.Credentials.from_service_account_file(credentials_path)
        kwargs["credentials"] = credentials
        project = project or credentials.project_id
        logger.debug(f"Using service account credentials from {credentials_path}")

    if project:
        kwargs["project"] = project

    if settings.EMULATOR_HOST:
        logger.warning(
            f"FIRESTORE_EMULATOR_HOST is set ({settings.EMULATOR_HOST}), "
            "deleting data from the Firestore emulator"
        )

    client = firestore.Client(**kwargs)
    logger.info(f"Firestore client created for project={client.project}, database={database}")
    return client


class FirestoreStore(RemoteStore):
    """RemoteStore backed by google-cloud-firestore."""

    max_batch_size = settings.MAX_BATCH_SIZE

    def __init__(
        self,
        client: Optional[firestore.Client] = None,
        project: Optional[str] = None,
        database: Optional[str] = None,
        credentials_path: Optional[str] = None,
        timeout: Optional[float] = None,
        classifier: Optional[ErrorClassifier] = None,
    ):
        """
        Initialize FirestoreStore.

        Args:
            client: Firestore client (created with create_client() if None)
            project: Project id passed to create_client()
            database: Database id (defaults to settings.FIRESTORE_DATABASE)
            credentials_path: Service account file passed to create_client()
            timeout: Per-call timeout in seconds (defaults to settings.CALL_TIMEOUT_SECONDS)
            classifier: ErrorClassifier used to translate client exceptions
        """
        self.database = database or settings.FIRESTORE_DATABASE
        self.client = client or create_client(project, self.database, credentials_path)
        self.timeout = timeout or settings.CALL_TIMEOUT_SECONDS
        self.classifier = classifier or ErrorClassifier()
        self._listings: dict[tuple[str, str], Iterator] = {}
        self._listings_lock = threading.Lock()

    @contextmanager
    def _translate_errors(self, paths: list[str]) -> Iterator[None]:
        try:
            yield
        except ProviderError:
            raise
        except Exception as e:
            raise self.classifier.classify(e, paths) from e

    def list_documents(
        self, collection_path: str, page_token: Optional[str] = None, page_size: int = 300
    ) -> tuple[list[str], Optional[str]]:
        """
        List one page of document paths, including missing documents.

        A missing document has no fields but still parents subcollections, so
        the listing must show it for a recursive walk to reach its children.
        The page token is the last document id of the previous page. The live
        listing behind it is kept so the next page continues the same stream;
        after a failed page the listing restarts and skips ids up to the token.
        """
        with self._listings_lock:
            references = self._listings.pop((collection_path, page_token), None)

        with self._translate_errors([collection_path]):
            if references is None:
                references = self._open_listing(collection_path, page_token, page_size)
            page = list(itertools.islice(references, page_size))

        paths = [reference.path for reference in page]
        next_token = page[-1].id if len(page) >= page_size else None

        if next_token is not None:
            with self._listings_lock:
                self._listings[(collection_path, next_token)] = references

        logger.debug(f"Listed {len(paths)} documents under {collection_path}")
        return paths, next_token

    def _open_listing(
        self, collection_path: str, page_token: Optional[str], page_size: int
    ) -> Iterator:
        references = iter(
            self.client.collection(collection_path).list_documents(
                page_size=page_size, retry=None, timeout=self.timeout
            )
        )
        if page_token:
            # Listing is ordered by document id
            references = itertools.dropwhile(
                lambda reference: reference.id <= page_token, references
            )
        return references

    def list_collection_ids(self, parent_path: str) -> list[str]:
        with self._translate_errors([parent_path]):
            if parent_path:
                collections = self.client.document(parent_path).collections(
                    retry=None, timeout=self.timeout
                )
            else:
                collections = self.client.collections(retry=None, timeout=self.timeout)
            return [collection.id for collection in collections]

    def batch_delete(self, document_paths: list[str]) -> list[str]:
        if len(document_paths) > self.max_batch_size:
            raise ValueError(
                f"Batch of {len(document_paths)} exceeds max batch size {self.max_batch_size}"
            )

        batch = self.client.batch()
        for path in document_paths:
            batch.delete(self.client.document(path))

        with self._translate_errors(document_paths):
            batch.commit(retry=None, timeout=self.timeout)

        return list(document_paths)

    def describe(self) -> str:
        return f"projects/{self.client.project}/databases/{self.database}"
