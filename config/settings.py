"""
Configuration constants for Firestore cleanup project.
"""
import os
from pathlib import Path

# Base directory (project root)
BASE_DIR = Path(__file__).parent.parent

# Target database
FIRESTORE_PROJECT = os.getenv("FIRESTORE_PROJECT", os.getenv("GOOGLE_CLOUD_PROJECT", ""))
FIRESTORE_DATABASE = os.getenv("FIRESTORE_DATABASE", "(default)")
CREDENTIALS_PATH = os.getenv("FIRESTORE_CREDENTIALS_PATH", "")  # Service account file; ADC when empty
EMULATOR_HOST = os.getenv("FIRESTORE_EMULATOR_HOST", "")

# Batching
MAX_BATCH_SIZE = 500  # Firestore limit on writes per commit
DELETE_BATCH_SIZE = int(os.getenv("DELETE_BATCH_SIZE", "500"))
LIST_PAGE_SIZE = int(os.getenv("LIST_PAGE_SIZE", "300"))

# Concurrency and throttling
MAX_WORKERS = int(os.getenv("MAX_WORKERS", "8"))
MAX_DELETES_PER_SECOND = int(os.getenv("MAX_DELETES_PER_SECOND", "5000"))

# Retry / backoff
MAX_RETRIES = int(os.getenv("MAX_RETRIES", "5"))
INITIAL_BACKOFF_SECONDS = 1.0
BACKOFF_MULTIPLIER = 2.0
MAX_BACKOFF_SECONDS = 60.0
CALL_TIMEOUT_SECONDS = float(os.getenv("CALL_TIMEOUT_SECONDS", "60"))

# Reporting
PROGRESS_LOG_INTERVAL = 10  # Log progress every N batches

# Paths (relative to BASE_DIR)
LOG_DIR = BASE_DIR / "data" / "logs"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Ensure data directories exist
LOG_DIR.mkdir(parents=True, exist_ok=True)
