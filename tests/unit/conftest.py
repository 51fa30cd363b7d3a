"""
Pytest configuration and shared fixtures for unit tests.
"""
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest  # noqa: E402

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

# Note: pytest_plugins is defined in the root tests/conftest.py
# to comply with pytest's requirement that it be at the top level


@pytest.fixture
def mock_store():
    """
    Create a mock RemoteStore.

    Includes:
    - max_batch_size: 500
    - list_documents(): Returns an empty, final page
    - list_collection_ids(): Returns no collections
    - batch_delete(): Echoes the paths it was given

    Tests can override any attribute or method as needed.
    """
    store = MagicMock()
    store.max_batch_size = 500
    store.list_documents.return_value = ([], None)
    store.list_collection_ids.return_value = []
    store.batch_delete.side_effect = lambda paths: list(paths)
    store.describe.return_value = "projects/test-project/databases/(default)"
    return store


@pytest.fixture
def temp_log_dir(tmp_path):
    """
    Temporary log directory.

    Args:
        tmp_path: Pytest's temporary directory fixture

    Returns:
        Path object pointing to the log directory
    """
    log_dir = tmp_path / "logs"
    log_dir.mkdir()
    return log_dir
