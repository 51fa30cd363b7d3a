"""
Tests for the Firestore-backed remote store.
"""
from unittest.mock import MagicMock, patch

import pytest
from google.api_core import exceptions as google_exceptions

from firestore_cleanup.errors import (
    NotFoundError,
    PermissionDeniedError,
    TransientProviderError,
)
from firestore_cleanup.store.firestore_store import FirestoreStore, create_client


def make_reference(path):
    reference = MagicMock()
    reference.id = path.rsplit("/", 1)[-1]
    reference.path = path
    return reference


@pytest.fixture
def mock_client():
    """Create a mock firestore.Client whose collections list no documents."""
    client = MagicMock()
    client.project = "test-project"
    client.collection.return_value.list_documents.return_value = iter([])
    return client


@pytest.mark.unit
class TestFirestoreStoreListDocuments:
    """Test FirestoreStore.list_documents()."""

    def test_full_page_returns_cursor(self, mock_client):
        """Test a full page returns the last id as the next token."""
        collection = mock_client.collection.return_value
        collection.list_documents.return_value = iter(
            [make_reference("users/a"), make_reference("users/b")]
        )
        store = FirestoreStore(client=mock_client, timeout=5)

        paths, token = store.list_documents("users", page_size=2)

        assert paths == ["users/a", "users/b"]
        assert token == "b"
        collection.list_documents.assert_called_once_with(page_size=2, retry=None, timeout=5)

    def test_short_page_is_last(self, mock_client):
        """Test a partial page has no next token."""
        collection = mock_client.collection.return_value
        collection.list_documents.return_value = iter([make_reference("users/a")])
        store = FirestoreStore(client=mock_client)

        paths, token = store.list_documents("users", page_size=2)

        assert paths == ["users/a"]
        assert token is None

    def test_missing_parent_documents_listed(self, mock_client):
        """Test documents that only parent subcollections are part of the page."""
        collection = mock_client.collection.return_value
        # "alice" has no fields, only a posts subcollection
        collection.list_documents.return_value = iter(
            [make_reference("users/alice"), make_reference("users/bob")]
        )
        store = FirestoreStore(client=mock_client)

        paths, _ = store.list_documents("users", page_size=10)

        assert paths == ["users/alice", "users/bob"]

    def test_next_page_continues_same_listing(self, mock_client):
        """Test the page token resumes the open listing without a new request."""
        collection = mock_client.collection.return_value
        collection.list_documents.return_value = iter(
            [make_reference(f"users/{name}") for name in ("a", "b", "c")]
        )
        store = FirestoreStore(client=mock_client)

        first, token = store.list_documents("users", page_size=2)
        second, last_token = store.list_documents("users", page_token=token, page_size=2)

        assert first == ["users/a", "users/b"]
        assert second == ["users/c"]
        assert last_token is None
        collection.list_documents.assert_called_once()

    def test_unknown_token_restarts_after_cursor(self, mock_client):
        """Test a token without an open listing skips ids up to the token."""
        collection = mock_client.collection.return_value
        collection.list_documents.return_value = iter(
            [make_reference(f"users/{name}") for name in ("a", "b", "c", "d")]
        )
        store = FirestoreStore(client=mock_client)

        paths, token = store.list_documents("users", page_token="b", page_size=10)

        assert paths == ["users/c", "users/d"]
        assert token is None

    def test_retry_after_failed_page_restarts_listing(self, mock_client):
        """Test a page that failed mid-stream is listed again from a fresh request."""

        def broken_listing():
            yield make_reference("users/a")
            yield make_reference("users/b")
            raise google_exceptions.ServiceUnavailable("down")

        collection = mock_client.collection.return_value
        collection.list_documents.side_effect = [
            broken_listing(),
            iter([make_reference(f"users/{name}") for name in ("a", "b", "c", "d")]),
        ]
        store = FirestoreStore(client=mock_client)

        _, token = store.list_documents("users", page_size=2)
        with pytest.raises(TransientProviderError):
            store.list_documents("users", page_token=token, page_size=2)
        paths, next_token = store.list_documents("users", page_token=token, page_size=2)

        assert paths == ["users/c", "users/d"]
        assert next_token == "d"
        assert collection.list_documents.call_count == 2

    def test_errors_translated(self, mock_client):
        """Test client exceptions surface as taxonomy errors."""
        collection = mock_client.collection.return_value
        collection.list_documents.side_effect = google_exceptions.ServiceUnavailable("down")
        store = FirestoreStore(client=mock_client)

        with pytest.raises(TransientProviderError) as exc_info:
            store.list_documents("users")
        assert exc_info.value.paths == ["users"]


@pytest.mark.unit
class TestFirestoreStoreCollections:
    """Test FirestoreStore.list_collection_ids()."""

    def test_root_collections(self, mock_client):
        """Test "" lists top-level collections."""
        users, orders = MagicMock(), MagicMock()
        users.id, orders.id = "users", "orders"
        mock_client.collections.return_value = iter([users, orders])
        store = FirestoreStore(client=mock_client)

        assert store.list_collection_ids("") == ["users", "orders"]

    def test_document_subcollections(self, mock_client):
        """Test a document path lists its subcollections."""
        posts = MagicMock()
        posts.id = "posts"
        mock_client.document.return_value.collections.return_value = iter([posts])
        store = FirestoreStore(client=mock_client)

        assert store.list_collection_ids("users/alice") == ["posts"]
        mock_client.document.assert_called_once_with("users/alice")

    def test_permission_denied(self, mock_client):
        """Test permission failures are translated."""
        mock_client.collections.side_effect = google_exceptions.PermissionDenied("no")
        store = FirestoreStore(client=mock_client)

        with pytest.raises(PermissionDeniedError):
            store.list_collection_ids("")


@pytest.mark.unit
class TestFirestoreStoreBatchDelete:
    """Test FirestoreStore.batch_delete()."""

    def test_commits_one_batch(self, mock_client):
        """Test all paths go into one atomic commit."""
        batch = mock_client.batch.return_value
        store = FirestoreStore(client=mock_client, timeout=7)

        deleted = store.batch_delete(["users/a", "users/b"])

        assert deleted == ["users/a", "users/b"]
        assert batch.delete.call_count == 2
        batch.commit.assert_called_once_with(retry=None, timeout=7)

    def test_rejects_oversized_batch(self, mock_client):
        """Test more than max_batch_size paths is a programming error."""
        store = FirestoreStore(client=mock_client)

        with pytest.raises(ValueError):
            store.batch_delete([f"users/{i}" for i in range(store.max_batch_size + 1)])
        mock_client.batch.assert_not_called()

    def test_not_found_translated(self, mock_client):
        """Test NotFound during commit becomes NotFoundError."""
        mock_client.batch.return_value.commit.side_effect = google_exceptions.NotFound("gone")
        store = FirestoreStore(client=mock_client)

        with pytest.raises(NotFoundError):
            store.batch_delete(["users/a"])

    def test_describe(self, mock_client):
        """Test describe() names the project and database."""
        store = FirestoreStore(client=mock_client, database="staging")

        assert store.describe() == "projects/test-project/databases/staging"


@pytest.mark.unit
class TestCreateClient:
    """Test create_client()."""

    def test_uses_service_account_file(self):
        """Test a credentials file sets credentials and project."""
        with patch("firestore_cleanup.store.firestore_store.service_account") as mock_sa, patch(
            "firestore_cleanup.store.firestore_store.firestore.Client"
        ) as mock_client_cls, patch(
            "firestore_cleanup.store.firestore_store.settings"
        ) as mock_settings:
            mock_settings.FIRESTORE_PROJECT = ""
            mock_settings.FIRESTORE_DATABASE = "(default)"
            mock_settings.CREDENTIALS_PATH = ""
            mock_settings.EMULATOR_HOST = ""
            credentials = mock_sa.Credentials.from_service_account_file.return_value
            credentials.project_id = "sa-project"

            create_client(credentials_path="/tmp/key.json")

            mock_client_cls.assert_called_once_with(
                database="(default)", credentials=credentials, project="sa-project"
            )

    def test_emulator_warning(self):
        """Test a warning is logged when the emulator host is set."""
        with patch("firestore_cleanup.store.firestore_store.firestore.Client"), patch(
            "firestore_cleanup.store.firestore_store.settings"
        ) as mock_settings, patch("firestore_cleanup.store.firestore_store.logger") as mock_logger:
            mock_settings.FIRESTORE_PROJECT = "demo"
            mock_settings.FIRESTORE_DATABASE = "(default)"
            mock_settings.CREDENTIALS_PATH = ""
            mock_settings.EMULATOR_HOST = "localhost:8080"

            create_client()

            assert "FIRESTORE_EMULATOR_HOST" in mock_logger.warning.call_args[0][0]
