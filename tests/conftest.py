"""Test environment: in-memory SQLite and a fixed session secret, set before edusite is imported."""

import os

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["APP_ENV"] = "dev"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["SESSION_TTL_DAYS"] = "30"
os.environ.pop("ADMIN_USERNAME", None)
os.environ.pop("ADMIN_PASSWORD", None)
