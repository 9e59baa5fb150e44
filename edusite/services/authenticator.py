"""
Session authenticator: registration, login, admin login, per-request session
resolution, logout, and the role gate used by privileged operations.

Users and sessions live in injected stores (UserRepository, SessionStore); this
module holds no state of its own.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from edusite.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ValidationError,
)
from edusite.core.security import (
    FULL_NAME_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    dummy_password_hash,
    hash_password,
    new_session_token,
    verify_password,
)
from edusite.models import ROLE_ADMIN, ROLE_USER, User
from edusite.schemas.auth import UserPublic
from edusite.services.sessions import SessionStore
from edusite.services.users import USERNAME_TAKEN_MESSAGE, UserRepository, public_user

if TYPE_CHECKING:
    from edusite.core.config import Settings

logger = logging.getLogger(__name__)

# One message for every credential mismatch; never say which part was wrong.
INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"
ADMIN_REQUIRED_MESSAGE = "Admin access required"
NOT_AUTHENTICATED_MESSAGE = "Not authenticated"


@dataclass(frozen=True)
class AuthResult:
    """A freshly established session: the user projection plus the token to put in the cookie."""

    user: UserPublic
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class AuthContext:
    """
    Per-request identity. user is None for anonymous requests.
    stale is True when the request carried a cookie that no longer maps to a
    live session; the cookie should then be cleared.
    """

    user: UserPublic | None = None
    stale: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


def sanitize_registration(data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Reduce a registration payload to the fields a client may set and force
    role to 'user'. Whatever else the payload carries (role, id, bio, ...)
    is dropped here, independent of the request schema.
    """
    return {
        "username": data.get("username"),
        "password": data.get("password"),
        "full_name": data.get("fullName", data.get("full_name")),
        "role": ROLE_USER,
    }


def _validate_registration(fields: Mapping[str, Any]) -> tuple[str, str, str]:
    username = fields.get("username")
    password = fields.get("password")
    full_name = fields.get("full_name")
    if not all(isinstance(v, str) and v.strip() for v in (username, password, full_name)):
        raise ValidationError("Username, password, and full name are required")
    username = username.strip()
    full_name = full_name.strip()
    if len(username) < USERNAME_MIN_LEN:
        raise ValidationError(f"Username must be at least {USERNAME_MIN_LEN} characters")
    if len(username) > USERNAME_MAX_LEN:
        raise ValidationError(f"Username must be at most {USERNAME_MAX_LEN} characters")
    if len(password) < PASSWORD_MIN_LEN:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LEN} characters")
    if len(full_name) > FULL_NAME_MAX_LEN:
        raise ValidationError(f"Full name must be at most {FULL_NAME_MAX_LEN} characters")
    return username, password, full_name


def _validate_credentials(username: Any, password: Any) -> tuple[str, str]:
    if not (isinstance(username, str) and username.strip()):
        raise ValidationError("Username and password are required")
    if not (isinstance(password, str) and password):
        raise ValidationError("Username and password are required")
    return username.strip(), password


def require_role(ctx: AuthContext, role: str | None = None) -> UserPublic:
    """
    Gate for privileged operations. Raises AuthenticationError for anonymous
    contexts and AuthorizationError when role is given and does not match.
    """
    if ctx.user is None:
        raise AuthenticationError(NOT_AUTHENTICATED_MESSAGE)
    if role is not None and ctx.user.role != role:
        raise AuthorizationError(ADMIN_REQUIRED_MESSAGE if role == ROLE_ADMIN else None)
    return ctx.user


class SessionAuthenticator:
    def __init__(
        self,
        users: UserRepository,
        sessions: SessionStore,
        settings: "Settings",
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._ttl = timedelta(days=settings.SESSION_TTL_DAYS)

    def register(self, payload: Mapping[str, Any]) -> AuthResult:
        """Create a 'user' account and log it in. Raises ValidationError or ConflictError."""
        fields = sanitize_registration(payload)
        username, password, full_name = _validate_registration(fields)

        # Fast path only; the unique index decides under concurrency.
        if self._users.get_by_username(username) is not None:
            raise ConflictError(USERNAME_TAKEN_MESSAGE)

        user = self._users.create(
            username=username,
            password_hash=hash_password(password),
            full_name=full_name,
            role=fields["role"],
        )
        logger.info("Registered user_id=%s", user.id)
        return self._establish_session(user)

    def login(self, username: Any, password: Any) -> AuthResult:
        username, password = _validate_credentials(username, password)
        user = self._users.get_by_username(username)
        if user is None:
            verify_password(password, dummy_password_hash())
            raise self._invalid_credentials()
        if not verify_password(password, user.password_hash):
            raise self._invalid_credentials()
        return self._establish_session(user)

    def admin_login(self, username: Any, password: Any) -> AuthResult:
        """
        Login for the admin panel. Checks existence, then role, then password,
        failing at the first mismatch. Unlike login, a non-admin account is
        reported as 403 rather than folded into the credential error.
        """
        username, password = _validate_credentials(username, password)
        user = self._users.get_by_username(username)
        if user is None:
            verify_password(password, dummy_password_hash())
            raise self._invalid_credentials()
        if user.role != ROLE_ADMIN:
            logger.warning("Admin login refused for non-admin user_id=%s", user.id)
            raise AuthorizationError(ADMIN_REQUIRED_MESSAGE)
        if not verify_password(password, user.password_hash):
            raise self._invalid_credentials()
        return self._establish_session(user)

    def resolve(self, token: str | None) -> AuthContext:
        """Map a session token to the request's identity."""
        if not token:
            return AuthContext()
        record = self._sessions.get(token)
        if record is None:
            return AuthContext(stale=True)
        if record.is_expired():
            self._sessions.destroy(token)
            return AuthContext(stale=True)
        user = self._users.get_by_id(record.user_id)
        if user is None:
            logger.info("Dropping session of missing user_id=%s", record.user_id)
            self._sessions.destroy(token)
            return AuthContext(stale=True)
        return AuthContext(user=public_user(user))

    def logout(self, token: str | None) -> None:
        """Destroy the session if there is one. Store failures propagate as InternalError."""
        if token:
            self._sessions.destroy(token)

    def _establish_session(self, user: User) -> AuthResult:
        token = new_session_token()
        expires_at = datetime.now(UTC) + self._ttl
        self._sessions.set(token, user.id, expires_at)
        logger.info("Session issued for user_id=%s", user.id)
        return AuthResult(user=public_user(user), token=token, expires_at=expires_at)

    @staticmethod
    def _invalid_credentials() -> AuthenticationError:
        logger.info("Login rejected: invalid credentials")
        return AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
