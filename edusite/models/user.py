"""ORM model for site accounts (registration, cookie sessions and RBAC)."""

from sqlalchemy import Column, Integer, String, Text

from edusite.models.base import Base

ROLE_ADMIN = "admin"
ROLE_USER = "user"
ROLES = (ROLE_ADMIN, ROLE_USER)


class User(Base):
    """
    User account for cookie-session authentication and role-based access control.

    role: 'admin' or 'user'. Registration always creates 'user'; admins come from
    the startup bootstrap, the create_user script, or an admin role change.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=ROLE_USER, server_default=ROLE_USER)
    full_name = Column(String(255), nullable=False)
    bio = Column(Text, nullable=True)
    # URL or data: URL of an uploaded image
    profile_photo = Column(Text, nullable=True)
