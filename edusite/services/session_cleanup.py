"""Session cleanup: delete auth_sessions rows whose absolute expiry has passed."""

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from edusite.models import AuthSession

if TYPE_CHECKING:
    from edusite.core.config import Settings

logger = logging.getLogger(__name__)


def run_session_cleanup(
    session: Session,
    settings: "Settings",
    now: datetime | None = None,
    dry_run: bool = False,
) -> int:
    """
    Delete expired sessions and return how many were removed (or, with
    dry_run, how many would be).

    Expired sessions are already rejected at resolution time; this only keeps
    the table small. Idempotent: safe to run repeatedly.
    """
    if not settings.SESSION_CLEANUP_ENABLED:
        logger.info("Session cleanup is disabled (SESSION_CLEANUP_ENABLED=false); skipping.")
        return 0

    cutoff = now or datetime.now(UTC)
    expired = session.query(AuthSession).filter(AuthSession.expires_at <= cutoff)
    if dry_run:
        return expired.count()

    deleted_count = expired.delete(synchronize_session=False)
    session.commit()

    if deleted_count > 0:
        logger.info(
            "Session cleanup: cutoff=%s, sessions_deleted=%s",
            cutoff.isoformat(),
            deleted_count,
        )
    return deleted_count
