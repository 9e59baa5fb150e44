"""Core app configuration, database, security and error types."""

from edusite.core.config import get_settings, settings
from edusite.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
