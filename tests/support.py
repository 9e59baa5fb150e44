"""Shared helpers: a fresh schema per test on the in-memory SQLite engine."""

import unittest

from edusite.core.database import SessionLocal, engine
from edusite.core.security import hash_password
from edusite.models import ROLE_USER, Base, User


class DatabaseTestCase(unittest.TestCase):
    """Creates all tables before each test and drops them afterwards."""

    def setUp(self) -> None:
        Base.metadata.create_all(engine)
        self.db = SessionLocal()

    def tearDown(self) -> None:
        self.db.close()
        Base.metadata.drop_all(engine)


def insert_user(
    username: str,
    password: str,
    role: str = ROLE_USER,
    full_name: str = "Test User",
) -> int:
    """Insert a user outside of any request and return its id."""
    db = SessionLocal()
    try:
        user = User(
            username=username,
            password_hash=hash_password(password),
            role=role,
            full_name=full_name,
        )
        db.add(user)
        db.commit()
        return user.id
    finally:
        db.close()
