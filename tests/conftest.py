"""
Root-level pytest configuration and shared fixtures for all tests.

This conftest.py is shared by both unit and integration tests.
It registers pytest markers and provides common fixtures.
"""
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest  # noqa: E402

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Expose fixtures from test fixture modules
# Note: pytest_plugins must be defined at the top level (root conftest)
pytest_plugins = [
    "tests.unit.fixtures.in_memory_store",
]


# Configure pytest markers
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (slower, with dependencies)")
    config.addinivalue_line("markers", "slow: Slow tests (may take significant time)")


@pytest.fixture
def no_sleep():
    """Sleep replacement recording requested delays instead of waiting."""
    return Mock(return_value=None)


@pytest.fixture
def fast_retry_policy(no_sleep):
    """RetryPolicy with the default budget that never actually sleeps."""
    from firestore_cleanup.safety.retry_policy import RetryPolicy

    return RetryPolicy(max_retries=3, initial_delay=0.01, sleep=no_sleep)


@pytest.fixture
def unlimited_rate_limiter():
    """RateLimiter high enough never to block a test."""
    from firestore_cleanup.safety.rate_limiter import RateLimiter

    return RateLimiter(max_per_second=1_000_000)
