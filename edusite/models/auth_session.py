"""ORM model for server-side login sessions (the cookie carries only the token)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func

from edusite.models.base import Base


class AuthSession(Base):
    """
    One row per issued session token.

    expires_at is absolute (created_at + SESSION_TTL_DAYS); it is never extended.
    """

    __tablename__ = "auth_sessions"

    token = Column(String(128), primary_key=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
