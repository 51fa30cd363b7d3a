"""
Batch deletion and run orchestration.
"""
from firestore_cleanup.deletion.batch_deleter import BatchDeleter, DeletionOutcome
from firestore_cleanup.deletion.confirmation import confirm, get_confirmation_message
from firestore_cleanup.deletion.orchestrator import DeletionOrchestrator, DeletionResult

__all__ = [
    "BatchDeleter",
    "DeletionOutcome",
    "DeletionOrchestrator",
    "DeletionResult",
    "confirm",
    "get_confirmation_message",
]
