"""Request/response schemas for auth endpoints. JSON field names are camelCase (fullName, profilePhoto)."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RegisterRequest(CamelModel):
    """
    Registration body. Fields are optional here so that missing values are
    reported as 400 by the authenticator rather than as schema errors.

    Unknown fields are kept (extra="allow") and stripped by
    sanitize_registration; a client-sent role never reaches the database.
    """

    model_config = ConfigDict(extra="allow")

    username: str | None = Field(default=None, description="Username (min 3 chars)")
    password: str | None = Field(default=None, description="Password (min 6 chars)")
    full_name: str | None = Field(default=None, description="Display name")


class CredentialsRequest(CamelModel):
    """Credentials for user-login and admin-login."""

    username: str | None = Field(default=None, description="Username")
    password: str | None = Field(default=None, description="Password")


class UserPublic(CamelModel):
    """Public projection of a user; the password hash is never part of it."""

    id: int
    username: str
    full_name: str
    role: str


class UserProfile(UserPublic):
    """Public projection plus the editable profile fields."""

    bio: str | None = None
    profile_photo: str | None = None


class AuthResponse(BaseModel):
    """Response for register, user-login, admin-login and me."""

    success: bool = True
    user: UserPublic


class SuccessResponse(BaseModel):
    success: bool = True


class ProfileUpdateRequest(CamelModel):
    """Profile fields a user may change on their own account. Anything else is rejected."""

    model_config = ConfigDict(extra="forbid")

    full_name: str | None = Field(default=None, max_length=255)
    bio: str | None = None
    profile_photo: str | None = Field(default=None, description="Image URL or data: URL")


class ProfileResponse(BaseModel):
    success: bool = True
    user: UserProfile


class RoleUpdateRequest(BaseModel):
    """Body for PATCH /users/{user_id}/role (admin only)."""

    role: str | None = Field(default=None, description="'admin' or 'user'")


class UsersListResponse(BaseModel):
    """Response for GET /users (admin only)."""

    success: bool = True
    users: list[UserPublic]
