"""
Purge expired login sessions from auth_sessions. Intended for cron:

  python -m edusite.session_cleanup            # delete
  python -m edusite.session_cleanup --dry-run  # only count

  0 3 * * * cd /srv/edusite && .venv/bin/python -m edusite.session_cleanup
"""

import argparse
import logging
import sys

from edusite.core.config import get_settings
from edusite.core.database import SessionLocal
from edusite.services.session_cleanup import run_session_cleanup

logger = logging.getLogger("edusite.session_cleanup")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Delete login sessions whose expiry has passed.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="report how many sessions would be deleted without deleting them",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    db = SessionLocal()
    try:
        count = run_session_cleanup(db, settings, dry_run=args.dry_run)
    except Exception:
        logger.exception("Session cleanup failed")
        return 1
    finally:
        db.close()
    verb = "would delete" if args.dry_run else "deleted"
    logger.info("Session cleanup %s %s expired session(s)", verb, count)
    return 0


if __name__ == "__main__":
    sys.exit(main())
