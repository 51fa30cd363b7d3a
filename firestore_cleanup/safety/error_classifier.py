"""
Error classifier translating provider exceptions into the deletion error taxonomy.
"""
from typing import Optional

from google.api_core import exceptions as google_exceptions

from firestore_cleanup.errors import (
    BatchTooLargeError,
    FatalProviderError,
    NotFoundError,
    PermissionDeniedError,
    ProviderError,
    TransientProviderError,
)
from firestore_cleanup.utils.logging import get_logger

logger = get_logger(__name__)


class ErrorClassifier:
    """Maps google.api_core exceptions onto transient/fatal/permission/not-found."""

    TRANSIENT_EXCEPTIONS = (
        google_exceptions.TooManyRequests,
        google_exceptions.ResourceExhausted,
        google_exceptions.DeadlineExceeded,
        google_exceptions.GatewayTimeout,
        google_exceptions.ServiceUnavailable,
        google_exceptions.InternalServerError,
        google_exceptions.Aborted,
        google_exceptions.RetryError,
        TimeoutError,
        ConnectionError,
    )

    PERMISSION_EXCEPTIONS = (
        google_exceptions.PermissionDenied,
        google_exceptions.Forbidden,
        google_exceptions.Unauthenticated,
        google_exceptions.Unauthorized,
    )

    # Messages the provider returns when a commit exceeds its size limits
    TOO_LARGE_INDICATORS = [
        "transaction too big",
        "request payload size exceeds",
        "too many writes",
        "maximum 500 writes",
        "exceeds the maximum",
    ]

    def __init__(self, additional_indicators: Optional[list] = None):
        """
        Initialize ErrorClassifier.

        Args:
            additional_indicators: Optional extra "batch too large" message fragments
        """
        self.too_large_indicators = self.TOO_LARGE_INDICATORS.copy()
        if additional_indicators:
            self.too_large_indicators.extend(additional_indicators)

    def classify(self, error: BaseException, paths: Optional[list[str]] = None) -> ProviderError:
        """
        Translate an exception raised by the store client.

        Args:
            error: Exception raised by a store call
            paths: Paths the failing call was operating on

        Returns:
            ProviderError subclass describing the failure
        """
        if isinstance(error, ProviderError):
            return error

        message = f"{type(error).__name__}: {error}"

        if isinstance(error, google_exceptions.NotFound):
            return NotFoundError(message, paths)

        if isinstance(error, self.PERMISSION_EXCEPTIONS):
            return PermissionDeniedError(message, paths)

        if isinstance(error, self.TRANSIENT_EXCEPTIONS):
            return TransientProviderError(message, paths)

        if isinstance(error, google_exceptions.BadRequest) and self.is_too_large(str(error)):
            return BatchTooLargeError(message, paths)

        if not isinstance(error, google_exceptions.GoogleAPIError):
            logger.debug(f"Unrecognized error type {type(error).__name__}, treating as fatal")

        return FatalProviderError(message, paths)

    def is_too_large(self, message: str) -> bool:
        """
        Check a provider message for "request too large" indicators.

        Args:
            message: Error message

        Returns:
            True if the message reports an oversized request
        """
        message_lower = message.lower()
        return any(indicator in message_lower for indicator in self.too_large_indicators)
