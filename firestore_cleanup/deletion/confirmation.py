"""
Confirmation prompt shown before any deletion is issued.
"""
from typing import Callable

from firestore_cleanup.scope.mode_resolver import DeletionMode


def get_confirmation_message(mode: DeletionMode, path: str, target: str) -> str:
    """
    Build the scope-specific confirmation question.

    Args:
        mode: Resolved DeletionMode
        path: Target path (unused for ALL_COLLECTIONS)
        target: Database description, e.g. projects/p/databases/(default)

    Returns:
        Question text
    """
    if mode == DeletionMode.ALL_COLLECTIONS:
        return f"You are about to delete THE ENTIRE DATABASE for {target}. Are you sure?"

    if mode == DeletionMode.RECURSIVE_DOCUMENT:
        return (
            f"You are about to delete the document at {path} "
            "and all of its subcollections. Are you sure?"
        )

    if mode == DeletionMode.SHALLOW_DOCUMENT:
        return f"You are about to delete the document at {path}. Are you sure?"

    if mode == DeletionMode.RECURSIVE_COLLECTION:
        return (
            f"You are about to delete all documents in the collection at {path} "
            "and all of their subcollections. Are you sure?"
        )

    return f"You are about to delete all documents in the collection at {path}. Are you sure?"


def confirm(message: str, input_func: Callable[[str], str] = input) -> bool:
    """
    Ask a yes/no question, defaulting to no.

    Args:
        message: Question text
        input_func: Function reading the answer (injectable for tests)

    Returns:
        True only for an explicit yes
    """
    try:
        answer = input_func(f"{message} (y/N): ")
    except EOFError:
        return False

    return answer.strip().lower() in ("y", "yes")
