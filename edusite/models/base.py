"""SQLAlchemy declarative Base shared by the users and auth_sessions tables."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""
