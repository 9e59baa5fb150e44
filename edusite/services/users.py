"""Credential store: user lookup, insert and profile/role updates over SQLAlchemy."""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from edusite.core.errors import ConflictError, InternalError, NotFoundError, ValidationError
from edusite.models import ROLES, User
from edusite.schemas.auth import UserProfile, UserPublic

logger = logging.getLogger(__name__)

USERNAME_TAKEN_MESSAGE = "Username already exists. Please choose a different username."


def public_user(user: User) -> UserPublic:
    """Projection safe to return to a client (no password hash)."""
    return UserPublic(
        id=user.id,
        username=user.username,
        full_name=user.full_name,
        role=user.role,
    )


def user_profile(user: User) -> UserProfile:
    return UserProfile(
        id=user.id,
        username=user.username,
        full_name=user.full_name,
        role=user.role,
        bio=user.bio,
        profile_photo=user.profile_photo,
    )


class UserRepository:
    def __init__(self, db: Session) -> None:
        self._db = db

    def get_by_id(self, user_id: int) -> User | None:
        try:
            return self._db.query(User).filter(User.id == user_id).first()
        except SQLAlchemyError as e:
            logger.exception("User lookup by id failed")
            raise InternalError() from e

    def get_by_username(self, username: str) -> User | None:
        """Exact, case-sensitive match."""
        try:
            return self._db.query(User).filter(User.username == username).first()
        except SQLAlchemyError as e:
            logger.exception("User lookup by username failed")
            raise InternalError() from e

    def list_users(self) -> list[User]:
        try:
            return self._db.query(User).order_by(User.id).all()
        except SQLAlchemyError as e:
            logger.exception("User listing failed")
            raise InternalError() from e

    def create(
        self,
        username: str,
        password_hash: str,
        full_name: str,
        role: str,
        bio: str | None = None,
    ) -> User:
        """
        Insert a user. The unique index on username is the authority on
        duplicates: a concurrent insert that wins the race turns this one
        into ConflictError.
        """
        user = User(
            username=username,
            password_hash=password_hash,
            full_name=full_name,
            role=role,
            bio=bio,
        )
        try:
            self._db.add(user)
            self._db.commit()
        except IntegrityError as e:
            self._db.rollback()
            logger.info("Rejected duplicate username on insert")
            raise ConflictError(USERNAME_TAKEN_MESSAGE) from e
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.exception("User insert failed")
            raise InternalError() from e
        self._db.refresh(user)
        return user

    def update_profile(
        self,
        user_id: int,
        full_name: str | None = None,
        bio: str | None = None,
        profile_photo: str | None = None,
    ) -> User:
        """Apply the given profile fields; None leaves a field unchanged."""
        user = self._require(user_id)
        if full_name is not None:
            full_name = full_name.strip()
            if not full_name:
                raise ValidationError("Full name cannot be empty")
            user.full_name = full_name
        if bio is not None:
            user.bio = bio
        if profile_photo is not None:
            user.profile_photo = profile_photo or None
        self._commit(user, "profile update")
        return user

    def set_role(self, user_id: int, role: str | None) -> User:
        if role not in ROLES:
            raise ValidationError(f"Role must be one of: {', '.join(ROLES)}")
        user = self._require(user_id)
        user.role = role
        self._commit(user, "role update")
        return user

    def _require(self, user_id: int) -> User:
        user = self.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def _commit(self, user: User, what: str) -> None:
        user_id = user.id
        try:
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.exception("User %s failed for user_id=%s", what, user_id)
            raise InternalError() from e
        self._db.refresh(user)
