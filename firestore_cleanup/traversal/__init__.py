"""
Tree enumeration over collections and their nested collections.
"""

from firestore_cleanup.traversal.pagination import PaginationHandler
from firestore_cleanup.traversal.tree_enumerator import TreeEnumerator, WorkUnit

__all__ = ["PaginationHandler", "TreeEnumerator", "WorkUnit"]
