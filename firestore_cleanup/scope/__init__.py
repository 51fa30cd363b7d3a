"""
Target classification and deletion mode resolution.
"""

from firestore_cleanup.scope.mode_resolver import DeletionMode, ModeResolver, preview_mode
from firestore_cleanup.scope.path_classifier import (
    AllCollectionsScope,
    CollectionScope,
    DocumentScope,
    classify,
)

__all__ = [
    "DocumentScope",
    "CollectionScope",
    "AllCollectionsScope",
    "classify",
    "DeletionMode",
    "ModeResolver",
    "preview_mode",
]
