"""
In-memory RemoteStore for exercising the deletion engine without Firestore.

Documents are kept as a set of full paths. Collections are implicit: a
collection exists while any document below it exists, which mirrors how
subcollections survive the deletion of their parent document. Listing a
collection also returns such missing parents, as Firestore does.
"""
import threading
from typing import Iterable, Optional

import pytest

from firestore_cleanup.store.base_store import RemoteStore


class InMemoryStore(RemoteStore):
    """RemoteStore over a set of document paths with call recording and error injection."""

    def __init__(self, documents: Iterable[str] = (), max_batch_size: int = 500):
        self.documents = set(documents)
        self.max_batch_size = max_batch_size
        self.calls: list[tuple] = []
        self.batches: list[list[str]] = []
        self._errors: dict[str, list[BaseException]] = {}
        self._lock = threading.Lock()

    def fail_next(self, method: str, *errors: BaseException) -> None:
        """Queue errors raised by the next calls to `method`, in order."""
        with self._lock:
            self._errors.setdefault(method, []).extend(errors)

    def calls_to(self, method: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == method]

    def _record(self, method: str, *args) -> None:
        with self._lock:
            self.calls.append((method, *args))
            queued = self._errors.get(method)
            error = queued.pop(0) if queued else None
        if error is not None:
            raise error

    def list_documents(
        self, collection_path: str, page_token: Optional[str] = None, page_size: int = 300
    ) -> tuple[list[str], Optional[str]]:
        self._record("list_documents", collection_path, page_token, page_size)

        prefix = f"{collection_path}/"
        with self._lock:
            # A document below a subcollection implies its (possibly missing) parent
            ids = sorted(
                {
                    path[len(prefix):].split("/")[0]
                    for path in self.documents
                    if path.startswith(prefix)
                }
            )

        if page_token is not None:
            ids = [document_id for document_id in ids if document_id > page_token]

        page = ids[:page_size]
        next_token = page[-1] if len(page) == page_size else None
        return [f"{prefix}{document_id}" for document_id in page], next_token

    def list_collection_ids(self, parent_path: str) -> list[str]:
        self._record("list_collection_ids", parent_path)

        prefix = f"{parent_path}/" if parent_path else ""
        with self._lock:
            return sorted(
                {
                    path[len(prefix):].split("/")[0]
                    for path in self.documents
                    if path.startswith(prefix)
                }
            )

    def batch_delete(self, document_paths: list[str]) -> list[str]:
        self._record("batch_delete", list(document_paths))

        with self._lock:
            self.batches.append(list(document_paths))
            deleted = [path for path in document_paths if path in self.documents]
            self.documents.difference_update(deleted)
        return deleted


def build_tree(collections: dict) -> set:
    """
    Expand a nested dict into document paths.

    {"users": {"alice": {"posts": {"p1": {}}}}} gives
    {"users/alice", "users/alice/posts/p1"}.
    """
    paths = set()

    def walk(prefix: str, tree: dict, collection_level: bool) -> None:
        for name, children in tree.items():
            path = f"{prefix}/{name}" if prefix else name
            if not collection_level:
                paths.add(path)
            walk(path, children, not collection_level)

    walk("", collections, True)
    return paths


SAMPLE_TREE = {
    "users": {
        "alice": {
            "posts": {
                "p1": {"comments": {"c1": {}, "c2": {}}},
                "p2": {},
            },
        },
        "bob": {},
        "carol": {"settings": {"prefs": {}}},
    },
    "orders": {
        "o1": {},
        "o2": {},
    },
}


@pytest.fixture
def sample_documents():
    """Document paths of a small two-collection tree with three levels of nesting."""
    return build_tree(SAMPLE_TREE)


@pytest.fixture
def memory_store(sample_documents):
    """InMemoryStore seeded with sample_documents."""
    return InMemoryStore(sample_documents)


@pytest.fixture
def empty_store():
    """InMemoryStore with no documents."""
    return InMemoryStore()
