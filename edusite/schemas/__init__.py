"""Pydantic request/response schemas."""

from edusite.schemas.auth import (
    AuthResponse,
    CredentialsRequest,
    ProfileResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    RoleUpdateRequest,
    SuccessResponse,
    UserProfile,
    UserPublic,
    UsersListResponse,
)
from edusite.schemas.health import HealthResponse

__all__ = [
    "AuthResponse",
    "CredentialsRequest",
    "HealthResponse",
    "ProfileResponse",
    "ProfileUpdateRequest",
    "RegisterRequest",
    "RoleUpdateRequest",
    "SuccessResponse",
    "UserProfile",
    "UserPublic",
    "UsersListResponse",
]
