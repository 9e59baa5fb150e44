"""
Create a user directly in the database (e.g. an extra admin). Run from project root:
  python -m edusite.scripts.create_user USERNAME PASSWORD [role] --full-name "Display Name"
Example:
  python -m edusite.scripts.create_user devansh devansh123 admin --full-name "Devansh"
"""
import argparse
import sys

from edusite.core.database import SessionLocal
from edusite.core.errors import AppError
from edusite.core.security import (
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    hash_password,
)
from edusite.models import ROLES, ROLE_USER
from edusite.services.users import UserRepository


def main() -> int:
    parser = argparse.ArgumentParser(description="Create an edusite user (bypasses registration).")
    parser.add_argument("username", help=f"Username ({USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password (at least {PASSWORD_MIN_LEN} chars)")
    parser.add_argument("role", nargs="?", default=ROLE_USER, choices=list(ROLES))
    parser.add_argument("--full-name", default=None, help="Display name (defaults to the username)")
    args = parser.parse_args()

    username = args.username.strip()
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        print("Invalid username length.", file=sys.stderr)
        return 1
    if len(args.password) < PASSWORD_MIN_LEN:
        print(f"Password must be at least {PASSWORD_MIN_LEN} characters.", file=sys.stderr)
        return 1
    full_name = (args.full_name or username).strip()

    db = SessionLocal()
    try:
        users = UserRepository(db)
        users.create(
            username=username,
            password_hash=hash_password(args.password),
            full_name=full_name,
            role=args.role,
        )
    except AppError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{username}' with role '{args.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
