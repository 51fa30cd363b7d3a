#!/usr/bin/env python3
"""
Firestore Cleanup - Main entry point.

Deletes a document, a collection, or every collection in a Firestore database,
optionally including all nested subcollections.
"""

import argparse
import signal
import sys
from pathlib import Path
from typing import Callable, Optional

# Add project root to path for imports
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

# Load environment variables
from dotenv import load_dotenv  # noqa: E402

load_dotenv()

from config import settings  # noqa: E402
from firestore_cleanup.deletion.confirmation import (  # noqa: E402
    confirm,
    get_confirmation_message,
)
from firestore_cleanup.deletion.orchestrator import DeletionOrchestrator  # noqa: E402
from firestore_cleanup.errors import (  # noqa: E402
    DeletionCancelledError,
    DeletionError,
    PermissionDeniedError,
    ProviderError,
    UsageError,
)
from firestore_cleanup.scope.mode_resolver import DeletionMode, preview_mode  # noqa: E402
from firestore_cleanup.scope.path_classifier import AllCollectionsScope, classify  # noqa: E402
from firestore_cleanup.store.base_store import RemoteStore  # noqa: E402
from firestore_cleanup.store.firestore_store import FirestoreStore  # noqa: E402
from firestore_cleanup.utils.logging import get_logger, setup_logging  # noqa: E402

# Global orchestrator so the signal handler can cancel a running delete
orchestrator = None


def build_parser() -> argparse.ArgumentParser:
    """
    Build the command-line parser.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Delete data from a Cloud Firestore database.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Delete a single document, leaving its subcollections alone
  python main.py users/alice --shallow

  # Delete a collection and everything below it
  python main.py users -r

  # Delete every collection in the database without prompting
  python main.py --all-collections --yes
        """,
    )

    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Slash-separated path of a document or collection to delete.",
    )
    parser.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        help="Also delete all nested subcollections and their documents.",
    )
    parser.add_argument(
        "--shallow",
        action="store_true",
        help="Delete only the target's own documents, leaving subcollections in place.",
    )
    parser.add_argument(
        "--all-collections",
        action="store_true",
        help="Delete every collection in the database. Ignores path and other flags.",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Skip the confirmation prompt.",
    )
    parser.add_argument(
        "--project",
        default=None,
        help="Project id. Defaults to FIRESTORE_PROJECT from the environment.",
    )
    parser.add_argument(
        "--database",
        default=None,
        help=f"Database id. Defaults to {settings.FIRESTORE_DATABASE}.",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help=f"Documents per delete batch (max {settings.MAX_BATCH_SIZE}).",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help=f"Concurrent list/delete workers. Defaults to {settings.MAX_WORKERS}.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level.",
    )

    return parser


def parse_arguments(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    return build_parser().parse_args(argv)


def signal_handler(signum, frame):
    """
    Handle interrupt signals by cancelling the running delete.

    The first interrupt lets in-flight batches finish; a second one exits
    immediately.
    """
    logger = get_logger()

    if orchestrator is None:
        sys.exit(1)

    if orchestrator.cancel_event.is_set():
        logger.error("Second interrupt received, exiting without waiting for in-flight batches")
        sys.exit(1)

    logger.warning("Interrupt received, finishing in-flight batches (interrupt again to exit now)...")
    orchestrator.cancel()


def describe_target(project: Optional[str], database: Optional[str]) -> str:
    """Database description used in the confirmation prompt."""
    project = project or settings.FIRESTORE_PROJECT or "(default project)"
    database = database or settings.FIRESTORE_DATABASE
    return f"projects/{project}/databases/{database}"


def run_delete(
    path: Optional[str] = None,
    recursive: bool = False,
    shallow: bool = False,
    all_collections: bool = False,
    yes: bool = False,
    project: Optional[str] = None,
    database: Optional[str] = None,
    batch_size: Optional[int] = None,
    max_workers: Optional[int] = None,
    store: Optional[RemoteStore] = None,
    input_func: Callable[[str], str] = input,
    log_level: Optional[str] = None,
) -> int:
    """
    Execute one delete command.

    Nothing touches the network until the target is validated and the user
    has confirmed.

    Args:
        path: Document or collection path (ignored with all_collections)
        recursive: Delete nested subcollections too
        shallow: Delete only the target's own documents
        all_collections: Delete every collection in the database
        yes: Skip the confirmation prompt
        project: Project id override
        database: Database id override
        batch_size: Documents per delete batch
        max_workers: Concurrent workers
        store: RemoteStore to use (a FirestoreStore is created when omitted)
        input_func: Function reading the confirmation answer
        log_level: Console log level

    Returns:
        Exit code (0 for success, 1 for any failure or abort)
    """
    global orchestrator

    logger = setup_logging(log_level, target="all-collections" if all_collections else path)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    # Validate before anything else
    try:
        if all_collections:
            scope = AllCollectionsScope(path or "")
        elif not path:
            raise UsageError("Must specify a path.")
        else:
            scope = classify(path)
        mode = preview_mode(scope, recursive=recursive, shallow=shallow, logger_instance=logger)
    except UsageError as e:
        logger.error(f"Invalid command: {e}")
        return 1

    if not yes:
        message = get_confirmation_message(mode, scope.path, describe_target(project, database))
        if not confirm(message, input_func=input_func):
            logger.error("Command aborted.")
            return 1

    logger.info("=" * 60)
    logger.info("Firestore Cleanup")
    logger.info("=" * 60)
    target = describe_target(project, database) if mode == DeletionMode.ALL_COLLECTIONS else scope.path
    logger.info(f"Target: {target}")
    logger.info(f"Flags: recursive={recursive}, shallow={shallow}")
    logger.info(f"Batch size: {batch_size or settings.DELETE_BATCH_SIZE}")
    logger.info(f"Max workers: {max_workers or settings.MAX_WORKERS}")
    logger.info("=" * 60)

    try:
        if store is None:
            store = FirestoreStore(project=project, database=database)

        orchestrator = DeletionOrchestrator(
            store,
            batch_size=batch_size,
            max_workers=max_workers,
            logger_instance=logger,
        )

        if mode == DeletionMode.ALL_COLLECTIONS:
            result = orchestrator.delete_database()
        else:
            result = orchestrator.execute(scope, recursive=recursive, shallow=shallow)

        logger.info(f"Delete complete: {result.deleted_count} documents deleted")
        return 0

    except UsageError as e:
        logger.error(f"Invalid command: {e}")
        return 1

    except DeletionCancelledError as e:
        logger.warning(str(e))
        logger.warning("Run the same command again to delete the remaining documents.")
        return 1

    except DeletionError as e:
        if isinstance(e.cause, PermissionDeniedError):
            logger.error("=" * 60)
            logger.error("ERROR: Permission denied")
            logger.error("=" * 60)
            logger.error("Check that the credentials can list and delete documents in this database.")
        logger.error(str(e))
        return 1

    except PermissionDeniedError as e:
        logger.error("=" * 60)
        logger.error("ERROR: Permission denied")
        logger.error("=" * 60)
        logger.error(str(e))
        return 1

    except ProviderError as e:
        logger.error(f"Firestore request failed: {e}")
        return 1

    except Exception as e:
        logger.error("=" * 60)
        logger.error("ERROR: Unexpected error during delete")
        logger.error("=" * 60)
        logger.error(f"Error: {e}", exc_info=True)
        return 1

    finally:
        orchestrator = None


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the Firestore cleanup command.

    Parses command-line arguments and runs the delete.
    """
    try:
        args = parse_arguments(argv)
        return run_delete(
            path=args.path,
            recursive=args.recursive,
            shallow=args.shallow,
            all_collections=args.all_collections,
            yes=args.yes,
            project=args.project,
            database=args.database,
            batch_size=args.batch_size,
            max_workers=args.max_workers,
            log_level=args.log_level,
        )
    except KeyboardInterrupt:
        logger = setup_logging()
        logger.warning("Interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
