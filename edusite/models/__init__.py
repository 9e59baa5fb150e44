"""SQLAlchemy ORM models."""

from edusite.models.auth_session import AuthSession
from edusite.models.base import Base
from edusite.models.user import ROLE_ADMIN, ROLE_USER, ROLES, User

__all__ = ["AuthSession", "Base", "ROLE_ADMIN", "ROLE_USER", "ROLES", "User"]
