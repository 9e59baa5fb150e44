"""Tests for SessionAuthenticator: registration, logins, session resolution, logout and the role gate."""

import os
import tempfile
import threading
import unittest
from datetime import UTC, datetime, timedelta

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from edusite.core.config import get_settings
from edusite.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ValidationError,
)
from edusite.models import ROLE_ADMIN, ROLE_USER, Base, User
from edusite.schemas.auth import UserPublic
from edusite.services.authenticator import (
    INVALID_CREDENTIALS_MESSAGE,
    AuthContext,
    SessionAuthenticator,
    require_role,
    sanitize_registration,
)
from edusite.services.sessions import InMemorySessionStore
from edusite.services.users import UserRepository
from tests.support import DatabaseTestCase, insert_user


class AuthenticatorTestCase(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.users = UserRepository(self.db)
        self.sessions = InMemorySessionStore()
        self.auth = SessionAuthenticator(self.users, self.sessions, get_settings())


class TestSanitizeRegistration(unittest.TestCase):
    def test_role_is_forced_and_extras_dropped(self) -> None:
        clean = sanitize_registration(
            {
                "username": "mallory",
                "password": "secret1",
                "fullName": "Mallory",
                "role": "admin",
                "id": 1,
                "bio": "x",
            }
        )
        self.assertEqual(
            clean,
            {
                "username": "mallory",
                "password": "secret1",
                "full_name": "Mallory",
                "role": ROLE_USER,
            },
        )

    def test_snake_case_full_name_accepted(self) -> None:
        clean = sanitize_registration({"full_name": "Jane"})
        self.assertEqual(clean["full_name"], "Jane")
        self.assertEqual(clean["role"], ROLE_USER)


class TestRegister(AuthenticatorTestCase):
    def test_creates_user_and_session(self) -> None:
        result = self.auth.register(
            {"username": "jdoe", "password": "secret1", "fullName": "Jane Doe"}
        )
        self.assertEqual(result.user.username, "jdoe")
        self.assertEqual(result.user.full_name, "Jane Doe")
        self.assertEqual(result.user.role, ROLE_USER)
        record = self.sessions.get(result.token)
        self.assertIsNotNone(record)
        self.assertEqual(record.user_id, result.user.id)

        stored = self.users.get_by_username("jdoe")
        self.assertNotEqual(stored.password_hash, "secret1")
        self.assertNotIn("secret1", stored.password_hash)

    def test_client_supplied_admin_role_is_ignored(self) -> None:
        result = self.auth.register(
            {"username": "mallory", "password": "secret1", "fullName": "M", "role": "admin"}
        )
        self.assertEqual(result.user.role, ROLE_USER)
        self.assertEqual(self.users.get_by_username("mallory").role, ROLE_USER)

    def test_session_expires_after_ttl(self) -> None:
        before = datetime.now(UTC)
        result = self.auth.register(
            {"username": "jdoe", "password": "secret1", "fullName": "Jane Doe"}
        )
        expected = before + timedelta(days=get_settings().SESSION_TTL_DAYS)
        self.assertLess(abs((result.expires_at - expected).total_seconds()), 5)

    def test_fields_are_trimmed(self) -> None:
        result = self.auth.register(
            {"username": "  jdoe ", "password": "secret1", "fullName": " Jane Doe "}
        )
        self.assertEqual(result.user.username, "jdoe")
        self.assertEqual(result.user.full_name, "Jane Doe")

    def test_validation_errors(self) -> None:
        cases = [
            ({}, "required"),
            ({"username": "jdoe", "password": "secret1"}, "required"),
            ({"username": "jdoe", "password": "secret1", "fullName": "   "}, "required"),
            ({"username": "   ", "password": "secret1", "fullName": "J"}, "required"),
            ({"username": "jd", "password": "secret1", "fullName": "J"}, "Username"),
            ({"username": " jd ", "password": "secret1", "fullName": "J"}, "Username"),
            ({"username": "jdoe", "password": "12345", "fullName": "J"}, "Password"),
            ({"username": "jdoe", "password": "      ", "fullName": "J"}, "required"),
            ({"username": 123, "password": "secret1", "fullName": "J"}, "required"),
        ]
        for payload, fragment in cases:
            with self.subTest(payload=payload):
                with self.assertRaises(ValidationError) as ctx:
                    self.auth.register(payload)
                self.assertIn(fragment, ctx.exception.message)
        self.assertEqual(self.users.list_users(), [])
        self.assertEqual(len(self.sessions), 0)

    def test_long_password_is_accepted(self) -> None:
        password = "p" * 4096
        result = self.auth.register({"username": "jdoe", "password": password, "fullName": "Jane"})
        self.assertEqual(self.auth.login("jdoe", password).user.id, result.user.id)

    def test_duplicate_username_conflicts(self) -> None:
        self.auth.register({"username": "jdoe", "password": "secret1", "fullName": "Jane"})
        with self.assertRaises(ConflictError):
            self.auth.register({"username": "jdoe", "password": "other12", "fullName": "Joe"})
        self.assertEqual(len(self.users.list_users()), 1)

    def test_usernames_are_case_sensitive(self) -> None:
        self.auth.register({"username": "jdoe", "password": "secret1", "fullName": "Jane"})
        result = self.auth.register({"username": "JDoe", "password": "secret1", "fullName": "J"})
        self.assertEqual(result.user.username, "JDoe")

    def test_unique_index_rejects_insert_that_skipped_the_precheck(self) -> None:
        self.users.create("jdoe", "x.y", "Jane", ROLE_USER)
        with self.assertRaises(ConflictError):
            self.users.create("jdoe", "x.y", "Joe", ROLE_USER)
        self.assertEqual(len(self.users.list_users()), 1)


class TestRegisterRace(unittest.TestCase):
    """Two registrations of one username that both pass the pre-check: the unique index admits one."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.engine = create_engine(
            f"sqlite+pysqlite:///{os.path.join(self._tmp.name, 'race.db')}",
            connect_args={"check_same_thread": False, "timeout": 10},
        )
        Base.metadata.create_all(self.engine)
        self.make_session = sessionmaker(bind=self.engine, autoflush=False)

    def tearDown(self) -> None:
        self.engine.dispose()
        self._tmp.cleanup()

    def test_concurrent_duplicate_registration(self) -> None:
        barrier = threading.Barrier(2)
        outcomes: list[str] = []
        lock = threading.Lock()

        class PrecheckBarrierRepository(UserRepository):
            def get_by_username(self, username):
                user = super().get_by_username(username)
                barrier.wait(timeout=10)
                return user

        def register(full_name: str) -> None:
            db = self.make_session()
            try:
                auth = SessionAuthenticator(
                    PrecheckBarrierRepository(db), InMemorySessionStore(), get_settings()
                )
                try:
                    auth.register({"username": "jdoe", "password": "secret1", "fullName": full_name})
                    outcome = "ok"
                except ConflictError:
                    outcome = "409"
                with lock:
                    outcomes.append(outcome)
            finally:
                db.close()

        threads = [threading.Thread(target=register, args=(name,)) for name in ("Jane", "Joe")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        self.assertEqual(sorted(outcomes), ["409", "ok"])
        db = self.make_session()
        try:
            self.assertEqual(db.query(User).filter(User.username == "jdoe").count(), 1)
        finally:
            db.close()


class TestLogin(AuthenticatorTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = insert_user("jdoe", "secret1", full_name="Jane Doe")

    def test_success_issues_fresh_session(self) -> None:
        first = self.auth.login("jdoe", "secret1")
        second = self.auth.login("jdoe", "secret1")
        self.assertEqual(first.user.id, self.user_id)
        self.assertNotEqual(first.token, second.token)
        self.assertEqual(len(self.sessions), 2)

    def test_unknown_user_and_wrong_password_look_the_same(self) -> None:
        with self.assertRaises(AuthenticationError) as missing:
            self.auth.login("nobody", "secret1")
        with self.assertRaises(AuthenticationError) as wrong:
            self.auth.login("jdoe", "wrongpass")
        self.assertEqual(missing.exception.message, INVALID_CREDENTIALS_MESSAGE)
        self.assertEqual(wrong.exception.message, missing.exception.message)
        self.assertEqual(wrong.exception.status_code, 401)
        self.assertEqual(len(self.sessions), 0)

    def test_missing_fields(self) -> None:
        for username, password in [(None, "secret1"), ("jdoe", None), ("", ""), ("  ", "x")]:
            with self.subTest(username=username, password=password):
                with self.assertRaises(ValidationError):
                    self.auth.login(username, password)

    def test_public_projection_has_no_hash(self) -> None:
        result = self.auth.login("jdoe", "secret1")
        dumped = result.user.model_dump(by_alias=True)
        self.assertEqual(set(dumped), {"id", "username", "fullName", "role"})


class TestAdminLogin(AuthenticatorTestCase):
    def setUp(self) -> None:
        super().setUp()
        insert_user("devansh", "devansh123", role=ROLE_ADMIN, full_name="Devansh")
        insert_user("jdoe", "secret1")

    def test_admin_success(self) -> None:
        result = self.auth.admin_login("devansh", "devansh123")
        self.assertEqual(result.user.role, ROLE_ADMIN)
        self.assertIsNotNone(self.sessions.get(result.token))

    def test_wrong_password(self) -> None:
        with self.assertRaises(AuthenticationError) as ctx:
            self.auth.admin_login("devansh", "wrongpass")
        self.assertEqual(ctx.exception.message, INVALID_CREDENTIALS_MESSAGE)

    def test_unknown_user(self) -> None:
        with self.assertRaises(AuthenticationError):
            self.auth.admin_login("ghost", "devansh123")

    def test_non_admin_is_forbidden_before_password_check(self) -> None:
        with self.assertRaises(AuthorizationError):
            self.auth.admin_login("jdoe", "secret1")
        with self.assertRaises(AuthorizationError):
            self.auth.admin_login("jdoe", "wrongpass")
        self.assertEqual(len(self.sessions), 0)


class TestResolveAndLogout(AuthenticatorTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = insert_user("jdoe", "secret1", full_name="Jane Doe")

    def test_no_token_is_anonymous(self) -> None:
        ctx = self.auth.resolve(None)
        self.assertFalse(ctx.is_authenticated)
        self.assertFalse(ctx.stale)

    def test_unknown_token_is_stale(self) -> None:
        ctx = self.auth.resolve("not-a-session")
        self.assertIsNone(ctx.user)
        self.assertTrue(ctx.stale)

    def test_live_session_resolves_to_user(self) -> None:
        token = self.auth.login("jdoe", "secret1").token
        ctx = self.auth.resolve(token)
        self.assertTrue(ctx.is_authenticated)
        self.assertEqual(ctx.user.username, "jdoe")
        self.assertEqual(ctx.user.full_name, "Jane Doe")

    def test_expired_session_is_destroyed(self) -> None:
        self.sessions.set("old", self.user_id, datetime.now(UTC) - timedelta(seconds=1))
        ctx = self.auth.resolve("old")
        self.assertTrue(ctx.stale)
        self.assertIsNone(ctx.user)
        self.assertIsNone(self.sessions.get("old"))

    def test_session_of_deleted_user_is_destroyed(self) -> None:
        token = self.auth.login("jdoe", "secret1").token
        self.db.query(User).filter(User.id == self.user_id).delete()
        self.db.commit()
        ctx = self.auth.resolve(token)
        self.assertTrue(ctx.stale)
        self.assertIsNone(self.sessions.get(token))

    def test_logout_ends_session(self) -> None:
        token = self.auth.login("jdoe", "secret1").token
        self.auth.logout(token)
        self.assertIsNone(self.sessions.get(token))
        self.assertTrue(self.auth.resolve(token).stale)

    def test_logout_without_session_is_noop(self) -> None:
        self.auth.logout(None)
        self.auth.logout("unknown")

    def test_login_after_logout_issues_new_token(self) -> None:
        old = self.auth.login("jdoe", "secret1").token
        self.auth.logout(old)
        new = self.auth.login("jdoe", "secret1").token
        self.assertNotEqual(old, new)
        self.assertTrue(self.auth.resolve(old).stale)
        self.assertTrue(self.auth.resolve(new).is_authenticated)


class TestRequireRole(unittest.TestCase):
    def _ctx(self, role: str) -> AuthContext:
        return AuthContext(user=UserPublic(id=1, username="u", full_name="U", role=role))

    def test_anonymous_raises_authentication_error(self) -> None:
        with self.assertRaises(AuthenticationError):
            require_role(AuthContext(), ROLE_ADMIN)
        with self.assertRaises(AuthenticationError):
            require_role(AuthContext(stale=True))

    def test_user_role_raises_authorization_error(self) -> None:
        with self.assertRaises(AuthorizationError) as ctx:
            require_role(self._ctx(ROLE_USER), ROLE_ADMIN)
        self.assertEqual(ctx.exception.status_code, 403)

    def test_admin_role_passes(self) -> None:
        user = require_role(self._ctx(ROLE_ADMIN), ROLE_ADMIN)
        self.assertEqual(user.role, ROLE_ADMIN)

    def test_no_role_requires_only_authentication(self) -> None:
        self.assertEqual(require_role(self._ctx(ROLE_USER)).role, ROLE_USER)


if __name__ == "__main__":
    unittest.main()
