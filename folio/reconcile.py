"""
Resolve creates that were interrupted between the relationship write and
the metadata insert.

Only meaningful when WRITE_INTENTS_ENABLED=true. Safe to run while the API
is serving: intents younger than the threshold are left alone.

Usage:
    folio-reconcile [--older-than SECONDS]
"""

import argparse
import logging
import sys

from .core.config import settings
from .core.logging_config import setup_logging
from .database import SessionLocal, init_db
from .exceptions import DependencyError
from .relationships import build_relationship_store
from .services.reconciler import Reconciler

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Resolve pending write intents.")
    parser.add_argument(
        "--older-than",
        type=float,
        default=settings.reconcile_after_seconds,
        help="Only resolve intents at least this many seconds old "
             f"(default: {settings.reconcile_after_seconds})",
    )
    args = parser.parse_args(argv)

    setup_logging(log_level=settings.log_level, log_format=settings.log_format)
    init_db()

    store = build_relationship_store(settings)
    db = SessionLocal()
    try:
        report = Reconciler(db, store).reconcile(args.older_than)
    except DependencyError as e:
        logger.error("Reconciliation aborted: %s", e.message, extra={"details": e.details})
        return 1
    finally:
        db.close()
        store.close()

    print(
        f"completed={report.completed} abandoned={report.abandoned} skipped={report.skipped}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
