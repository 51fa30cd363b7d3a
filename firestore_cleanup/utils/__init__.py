"""
Utility modules: logging, progress reporting.
"""
from firestore_cleanup.utils.logging import get_logger, setup_logging
from firestore_cleanup.utils.progress import DeletionProgress

__all__ = ["setup_logging", "get_logger", "DeletionProgress"]
