"""
Structured logging setup for Firestore cleanup project.

Each delete run writes its own log file, named after the target so runs
against different paths can be told apart in LOG_DIR.
"""
import logging
import re
import sys
from datetime import datetime
from typing import Optional

from config import settings

LOGGER_NAME = "firestore_cleanup"
MAX_TARGET_LENGTH = 60


def log_file_name(target: Optional[str] = None, now: Optional[datetime] = None) -> str:
    """
    Build the log file name for a run.

    Args:
        target: Deleted path, or a label such as "all-collections"
        now: Run start time (defaults to the current time)

    Returns:
        delete_<target>_YYYYMMDD_HHMMSS.log, or delete_YYYYMMDD_HHMMSS.log without a target
    """
    timestamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    # "users/alice/posts" -> "users-alice-posts"
    slug = re.sub(r"[^A-Za-z0-9_]+", "-", target or "").strip("-")[:MAX_TARGET_LENGTH]
    if slug:
        return f"delete_{slug}_{timestamp}.log"
    return f"delete_{timestamp}.log"


def setup_logging(log_level: str = None, target: Optional[str] = None) -> logging.Logger:
    """
    Set up structured logging with file and console handlers.

    The file handler records DEBUG output with the worker thread name, since
    listing and batch commits run on thread pools.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
                   Defaults to settings.LOG_LEVEL
        target: Deleted path used in the log file name

    Returns:
        Configured logger instance
    """
    if log_level is None:
        log_level = settings.LOG_LEVEL

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Clear any existing handlers
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(
        logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    )
    logger.addHandler(console_handler)

    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = settings.LOG_DIR / log_file_name(target)
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)  # File gets all logs
    file_handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] %(levelname)s [%(threadName)s]: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(file_handler)

    logger.info(f"Logging initialized. Log file: {log_file}")
    logger.debug(f"Log level: {log_level}")

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """
    Get a logger instance.

    Module loggers live under the ``firestore_cleanup`` namespace, so they
    share the handlers installed by setup_logging().

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
