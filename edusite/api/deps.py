"""FastAPI dependencies: stores, authenticator, per-request auth context and role gates."""

from typing import Annotated

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from edusite.api.cookies import clear_session_cookie
from edusite.core.config import get_settings
from edusite.core.database import get_db
from edusite.core.security import unsign_session_token
from edusite.models import ROLE_ADMIN
from edusite.schemas.auth import UserPublic
from edusite.services.authenticator import AuthContext, SessionAuthenticator, require_role
from edusite.services.sessions import SessionStore, SqlSessionStore
from edusite.services.users import UserRepository


def get_user_repository(db: Annotated[Session, Depends(get_db)]) -> UserRepository:
    return UserRepository(db)


def get_session_store(db: Annotated[Session, Depends(get_db)]) -> SessionStore:
    return SqlSessionStore(db)


def get_authenticator(
    users: Annotated[UserRepository, Depends(get_user_repository)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> SessionAuthenticator:
    return SessionAuthenticator(users, sessions, get_settings())


def session_token_from_request(request: Request) -> str | None:
    """The token inside the session cookie, or None when the cookie is absent or its signature is bad."""
    return unsign_session_token(request.cookies.get(get_settings().SESSION_COOKIE_NAME))


def get_auth_context(
    request: Request,
    response: Response,
    authenticator: Annotated[SessionAuthenticator, Depends(get_authenticator)],
) -> AuthContext:
    """
    Resolve the session cookie. A cookie that does not lead to a live session
    yields an anonymous context and is cleared, both on this response and on
    any error response raised later in the request.
    """
    if get_settings().SESSION_COOKIE_NAME not in request.cookies:
        return AuthContext()
    token = session_token_from_request(request)
    ctx = authenticator.resolve(token) if token else AuthContext(stale=True)
    if ctx.stale:
        request.state.clear_session_cookie = True
        clear_session_cookie(response)
    return ctx


def get_current_user(
    ctx: Annotated[AuthContext, Depends(get_auth_context)],
) -> UserPublic:
    """Dependency: require a logged-in user of any role. Raises 401 otherwise."""
    return require_role(ctx)


def require_admin(
    ctx: Annotated[AuthContext, Depends(get_auth_context)],
) -> UserPublic:
    """Dependency: require authenticated user with role 'admin'. Raises 401 if anonymous, 403 for non-admin."""
    return require_role(ctx, ROLE_ADMIN)
