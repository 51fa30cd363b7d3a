"""
Safety modules: error classification, retry with backoff, rate limiting.
"""

from firestore_cleanup.safety.error_classifier import ErrorClassifier
from firestore_cleanup.safety.rate_limiter import RateLimiter
from firestore_cleanup.safety.retry_policy import RetryPolicy

__all__ = ["ErrorClassifier", "RateLimiter", "RetryPolicy"]
