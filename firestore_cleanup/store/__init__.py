"""
Remote store interface and the Cloud Firestore implementation.
"""
from firestore_cleanup.store.base_store import RemoteStore
from firestore_cleanup.store.firestore_store import FirestoreStore, create_client

__all__ = ["RemoteStore", "FirestoreStore", "create_client"]
