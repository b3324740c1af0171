"""Utility script to register a user in the activity database."""

from __future__ import annotations

import argparse
from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError

from activity_api.domain.entities import User
from activity_api.infrastructure.database import SessionLocal, initialize_database
from activity_api.infrastructure.repositories import UserRepository
from activity_api.infrastructure.security import create_access_token


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for user creation."""

    parser = argparse.ArgumentParser(
        description="Register a user and optionally print a bearer token for it.",
    )
    parser.add_argument("--id", type=int, default=None, help="Explicit user id (optional)")
    parser.add_argument("--name", default="Administrator", help="Full name of the user")
    parser.add_argument(
        "--email", default="admin@example.com", help="Email address of the user"
    )
    parser.add_argument(
        "--role",
        default="admin",
        help="Role claim (superadmin, admin, centeradmin, staff or user)",
    )
    parser.add_argument(
        "--token-minutes",
        type=int,
        default=None,
        help="Print a bearer token valid for this many minutes",
    )
    return parser.parse_args()


def main() -> None:
    """Create a user using the provided command line arguments."""

    args = parse_args()
    initialize_database()

    session = SessionLocal()
    try:
        repository = UserRepository(session)
        if repository.get_by_email(args.email) is not None:
            raise SystemExit(f"A user with email {args.email} already exists.")
        user = repository.create(
            User(id=args.id, name=args.name, email=args.email, role=args.role)
        )
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Could not store the user: {exc}") from exc
    finally:
        session.close()

    print(
        "User created:\n"
        f"  ID: {user.id}\n"
        f"  Name: {user.name}\n"
        f"  Email: {user.email}\n"
        f"  Role: {user.role}"
    )
    if args.token_minutes:
        token = create_access_token(
            {"sub": str(user.id), "role": user.role},
            expires_delta=timedelta(minutes=args.token_minutes),
        )
        print(f"  Token: {token}")


if __name__ == "__main__":
    main()
