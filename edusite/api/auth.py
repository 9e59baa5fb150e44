"""Cookie-session auth routes: register, user/admin login, me, logout, profile and admin user management."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from edusite.api.cookies import clear_session_cookie, set_session_cookie
from edusite.api.deps import (
    get_authenticator,
    get_current_user,
    get_user_repository,
    require_admin,
    session_token_from_request,
)
from edusite.schemas.auth import (
    AuthResponse,
    CredentialsRequest,
    ProfileResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    RoleUpdateRequest,
    SuccessResponse,
    UserPublic,
    UsersListResponse,
)
from edusite.services.authenticator import SessionAuthenticator
from edusite.services.users import UserRepository, public_user, user_profile

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    response: Response,
    authenticator: Annotated[SessionAuthenticator, Depends(get_authenticator)],
) -> AuthResponse:
    """
    Create an account with role 'user' and log it in.
    Any role sent by the client is discarded.
    """
    result = authenticator.register(body.model_dump(by_alias=True))
    set_session_cookie(response, result.token)
    return AuthResponse(user=result.user)


@router.post("/user-login", response_model=AuthResponse)
def user_login(
    body: CredentialsRequest,
    response: Response,
    authenticator: Annotated[SessionAuthenticator, Depends(get_authenticator)],
) -> AuthResponse:
    """Authenticate with username and password; sets the session cookie."""
    result = authenticator.login(body.username, body.password)
    set_session_cookie(response, result.token)
    return AuthResponse(user=result.user)


@router.post("/admin-login", response_model=AuthResponse)
def admin_login(
    body: CredentialsRequest,
    response: Response,
    authenticator: Annotated[SessionAuthenticator, Depends(get_authenticator)],
) -> AuthResponse:
    """Login for the admin panel: 401 for bad credentials, 403 for a non-admin account."""
    result = authenticator.admin_login(body.username, body.password)
    set_session_cookie(response, result.token)
    return AuthResponse(user=result.user)


@router.get("/me", response_model=AuthResponse)
def me(user: Annotated[UserPublic, Depends(get_current_user)]) -> AuthResponse:
    return AuthResponse(user=user)


@router.post("/logout", response_model=SuccessResponse)
def logout(
    request: Request,
    response: Response,
    authenticator: Annotated[SessionAuthenticator, Depends(get_authenticator)],
) -> SuccessResponse:
    """Destroy the current session. The cookie is cleared even when the store fails (500)."""
    request.state.clear_session_cookie = True
    authenticator.logout(session_token_from_request(request))
    clear_session_cookie(response)
    return SuccessResponse()


@router.patch("/profile", response_model=ProfileResponse)
def update_profile(
    body: ProfileUpdateRequest,
    user: Annotated[UserPublic, Depends(get_current_user)],
    users: Annotated[UserRepository, Depends(get_user_repository)],
) -> ProfileResponse:
    """Update the caller's display name, bio or profile photo."""
    updated = users.update_profile(
        user.id,
        full_name=body.full_name,
        bio=body.bio,
        profile_photo=body.profile_photo,
    )
    return ProfileResponse(user=user_profile(updated))


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[UserPublic, Depends(require_admin)],
    users: Annotated[UserRepository, Depends(get_user_repository)],
) -> UsersListResponse:
    """List all users (admin only)."""
    return UsersListResponse(users=[public_user(u) for u in users.list_users()])


@router.patch("/users/{user_id}/role", response_model=AuthResponse)
def update_role(
    user_id: int,
    body: RoleUpdateRequest,
    admin: Annotated[UserPublic, Depends(require_admin)],
    users: Annotated[UserRepository, Depends(get_user_repository)],
) -> AuthResponse:
    """Change a user's role (admin only). The only path besides the CLI that can mint an admin."""
    updated = users.set_role(user_id, body.role)
    logger.info("Admin user_id=%s set role of user_id=%s to %s", admin.id, user_id, updated.role)
    return AuthResponse(user=public_user(updated))
