"""Startup seeding of the site's admin account from ADMIN_USERNAME / ADMIN_PASSWORD."""

import logging
from typing import TYPE_CHECKING

from edusite.core.errors import ConflictError
from edusite.core.security import PASSWORD_MIN_LEN, hash_password
from edusite.models import ROLE_ADMIN
from edusite.services.users import UserRepository

if TYPE_CHECKING:
    from edusite.core.config import Settings

logger = logging.getLogger(__name__)


def ensure_admin_user(
    users: UserRepository,
    username: str,
    password: str,
    full_name: str = "Site Admin",
) -> bool:
    """
    Create an admin account unless the username is already taken.
    Returns True when a user was created. An existing account is left as is,
    whatever its role.
    """
    existing = users.get_by_username(username)
    if existing is not None:
        if existing.role != ROLE_ADMIN:
            logger.warning(
                "Bootstrap admin '%s' exists with role '%s'; not changing it.",
                username,
                existing.role,
            )
        return False
    try:
        users.create(
            username=username,
            password_hash=hash_password(password),
            full_name=full_name,
            role=ROLE_ADMIN,
        )
    except ConflictError:
        # Another worker created it first.
        return False
    logger.info("Created bootstrap admin user '%s'", username)
    return True


def bootstrap_from_settings(users: UserRepository, settings: "Settings") -> bool:
    """Run ensure_admin_user when ADMIN_USERNAME and ADMIN_PASSWORD are both set."""
    if not settings.ADMIN_USERNAME or settings.ADMIN_PASSWORD is None:
        return False
    password = settings.ADMIN_PASSWORD.get_secret_value()
    if len(password) < PASSWORD_MIN_LEN:
        raise ValueError(f"ADMIN_PASSWORD must be at least {PASSWORD_MIN_LEN} characters")
    return ensure_admin_user(
        users,
        settings.ADMIN_USERNAME,
        password,
        full_name=settings.ADMIN_FULL_NAME,
    )
