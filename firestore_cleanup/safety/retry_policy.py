"""
Retry policy with exponential backoff for store calls.
"""
import time
from typing import Any, Callable, Optional, TypeVar

from config import settings
from firestore_cleanup.errors import FatalProviderError, TransientProviderError
from firestore_cleanup.safety.error_classifier import ErrorClassifier
from firestore_cleanup.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """Retries transient failures with strictly increasing exponential backoff."""

    def __init__(
        self,
        max_retries: Optional[int] = None,
        initial_delay: Optional[float] = None,
        backoff_multiplier: Optional[float] = None,
        max_delay: Optional[float] = None,
        classifier: Optional[ErrorClassifier] = None,
        sleep: Callable[[float], None] = time.sleep,
        on_retry: Optional[Callable[[int, Exception], None]] = None,
    ):
        """
        Initialize RetryPolicy.

        Args:
            max_retries: Retries allowed after the first attempt (defaults to settings.MAX_RETRIES)
            initial_delay: Delay before the first retry (defaults to settings.INITIAL_BACKOFF_SECONDS)
            backoff_multiplier: Growth factor between retries (defaults to settings.BACKOFF_MULTIPLIER)
            max_delay: Largest delay the retry budget may reach (defaults to settings.MAX_BACKOFF_SECONDS)
            classifier: ErrorClassifier used to translate exceptions
            sleep: Sleep function (injectable for tests)
            on_retry: Optional callback invoked with (retry_number, error) before each retry
        """
        self.max_retries = settings.MAX_RETRIES if max_retries is None else max_retries
        self.initial_delay = initial_delay or settings.INITIAL_BACKOFF_SECONDS
        self.backoff_multiplier = backoff_multiplier or settings.BACKOFF_MULTIPLIER
        self.max_delay = max_delay or settings.MAX_BACKOFF_SECONDS
        self.classifier = classifier or ErrorClassifier()
        self.sleep = sleep
        self.on_retry = on_retry

        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.backoff_multiplier <= 1:
            raise ValueError(f"backoff_multiplier must be > 1, got {self.backoff_multiplier}")
        if self.max_retries > 0 and self.compute_delay(self.max_retries) > self.max_delay:
            # Every delay in the budget must stay under max_delay
            raise ValueError(
                f"Backoff before retry {self.max_retries} would be "
                f"{self.compute_delay(self.max_retries):.1f}s, above max_delay {self.max_delay}s; "
                "lower max_retries or raise max_delay"
            )

    def compute_delay(self, retry_number: int) -> float:
        """
        Backoff delay before the given retry.

        Args:
            retry_number: 1 for the first retry, 2 for the second, ...

        Returns:
            Delay in seconds
        """
        return self.initial_delay * (self.backoff_multiplier ** (retry_number - 1))

    def call(
        self,
        operation: Callable[..., T],
        *args: Any,
        description: str = "store call",
        paths: Optional[list[str]] = None,
        **kwargs: Any,
    ) -> T:
        """
        Run an operation, retrying transient failures.

        Args:
            operation: Callable to invoke
            *args: Positional arguments for the operation
            description: Human-readable name used in log messages
            paths: Paths the operation touches, attached to raised errors
            **kwargs: Keyword arguments for the operation

        Returns:
            Whatever the operation returns

        Raises:
            FatalProviderError: After max_retries consecutive transient failures
            ProviderError: Non-transient failures, translated and raised immediately
        """
        for attempt in range(self.max_retries + 1):
            try:
                return operation(*args, **kwargs)
            except Exception as e:
                error = self.classifier.classify(e, paths)

                if not isinstance(error, TransientProviderError):
                    if error is e:
                        raise
                    raise error from e

                if attempt == self.max_retries:
                    logger.error(
                        f"{description} failed after {self.max_retries} retries: {error}"
                    )
                    raise FatalProviderError(
                        f"Retry budget exhausted for {description} "
                        f"({self.max_retries} retries): {error}",
                        paths,
                    ) from e

                delay = self.compute_delay(attempt + 1)
                logger.warning(
                    f"Transient failure in {description} "
                    f"(retry {attempt + 1}/{self.max_retries} in {delay:.2f}s): {error}"
                )
                if self.on_retry:
                    self.on_retry(attempt + 1, error)
                self.sleep(delay)

        # Unreachable: the loop either returns or raises
        raise FatalProviderError(f"{description} did not run", paths)
