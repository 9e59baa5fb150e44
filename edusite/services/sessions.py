"""Session store: token -> (user_id, expires_at), with SQL and in-memory implementations."""

import logging
import threading
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from edusite.core.errors import InternalError
from edusite.models import AuthSession

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """SQLite returns naive datetimes; stored values are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass(frozen=True)
class SessionRecord:
    token: str
    user_id: int
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(UTC)
        return as_utc(self.expires_at) <= now


class SessionStore(Protocol):
    def get(self, token: str) -> SessionRecord | None: ...

    def set(self, token: str, user_id: int, expires_at: datetime) -> SessionRecord: ...

    def destroy(self, token: str) -> None: ...


class InMemorySessionStore:
    """Process-local store for tests and single-process development."""

    def __init__(self) -> None:
        self._records: dict[str, SessionRecord] = {}
        self._lock = threading.Lock()

    def get(self, token: str) -> SessionRecord | None:
        with self._lock:
            return self._records.get(token)

    def set(self, token: str, user_id: int, expires_at: datetime) -> SessionRecord:
        record = SessionRecord(token=token, user_id=user_id, expires_at=as_utc(expires_at))
        with self._lock:
            self._records[token] = record
        return record

    def destroy(self, token: str) -> None:
        with self._lock:
            self._records.pop(token, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class SqlSessionStore:
    """Sessions in the auth_sessions table. Store failures surface as InternalError."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def get(self, token: str) -> SessionRecord | None:
        try:
            row = self._db.get(AuthSession, token)
        except SQLAlchemyError as e:
            logger.exception("Session lookup failed: %s", type(e).__name__)
            raise InternalError() from e
        if row is None:
            return None
        return SessionRecord(
            token=row.token,
            user_id=row.user_id,
            expires_at=as_utc(row.expires_at),
        )

    def set(self, token: str, user_id: int, expires_at: datetime) -> SessionRecord:
        try:
            self._db.add(
                AuthSession(
                    token=token,
                    user_id=user_id,
                    created_at=datetime.now(UTC),
                    expires_at=expires_at,
                )
            )
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.exception("Session write failed for user_id=%s", user_id)
            raise InternalError() from e
        return SessionRecord(token=token, user_id=user_id, expires_at=as_utc(expires_at))

    def destroy(self, token: str) -> None:
        try:
            self._db.query(AuthSession).filter(AuthSession.token == token).delete(
                synchronize_session=False
            )
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.exception("Session delete failed")
            raise InternalError() from e
