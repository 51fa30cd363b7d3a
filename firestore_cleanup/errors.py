"""
Exception taxonomy for deletion runs.
"""
from typing import Optional


class FirestoreCleanupError(Exception):
    """Base class for all errors raised by this package."""


class UsageError(FirestoreCleanupError):
    """Conflicting or ambiguous flags/path. Raised before any deletion."""


class InvalidPathError(UsageError):
    """Malformed path structure."""


class ProviderError(FirestoreCleanupError):
    """Error reported by the remote store."""

    def __init__(self, message: str, paths: Optional[list[str]] = None):
        super().__init__(message)
        self.paths = list(paths or [])


class PermissionDeniedError(ProviderError):
    """Insufficient list/delete rights. Never retried."""


class NotFoundError(ProviderError):
    """Target does not exist. Callers treat it as a successful no-op."""


class TransientProviderError(ProviderError):
    """Rate limiting, timeouts and transient network faults."""


class FatalProviderError(ProviderError):
    """Non-retryable provider response, or retry budget exhausted."""


class BatchTooLargeError(FatalProviderError):
    """Provider rejected a batch because the request was too large."""


class DeletionError(FirestoreCleanupError):
    """
    A deletion run did not complete.

    Attributes:
        cause: First fatal error encountered (None when cancelled)
        unresolved_paths: Document paths from batches that were not applied
        result: Partial DeletionResult for the run
    """

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        unresolved_paths: Optional[list[str]] = None,
        result=None,
    ):
        super().__init__(message)
        self.cause = cause
        self.unresolved_paths = list(unresolved_paths or [])
        self.result = result


class DeletionCancelledError(DeletionError):
    """Run stopped by cooperative cancellation."""
