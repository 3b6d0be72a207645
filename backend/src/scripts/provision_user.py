#!/usr/bin/env python3
"""
Create or update a user and optionally print an identity token.

Used to bootstrap the first organizer, and to hand out bearer tokens for
programmatic access. It is idempotent - running it again updates the role
and name of an existing user instead of creating a duplicate.

Usage:
    python -m backend.src.scripts.provision_user --email "lead@example.com" --role ORGANIZER

Options:
    --email         Email address of the user (required)
    --role          ORGANIZER or CORE_MEMBER (default: CORE_MEMBER)
    --name          Display name
    --token         Also print a bearer token (requires JWT_SECRET_KEY)
    --expires-in    Token lifetime in hours (default: JWT_TOKEN_EXPIRY_HOURS)

Examples:
    # First organizer, with a token for API access
    python -m backend.src.scripts.provision_user \\
        --email "lead@example.com" --name "Event Lead" --role ORGANIZER --token

    # Core member
    python -m backend.src.scripts.provision_user -e "member@example.com"
"""

import argparse
import signal
import sys
from typing import Optional


def signal_handler(signum, frame):
    """Handle CTRL+C gracefully."""
    print("\n\nOperation interrupted by user.")
    sys.exit(130)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Create or update an eventflow user.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --email "lead@example.com" --role ORGANIZER --token
  %(prog)s -e "member@example.com" -n "Core Member"

Notes:
  - This script is idempotent; running it multiple times is safe
  - Existing users are reactivated and get the given role
        """
    )

    parser.add_argument(
        "-e", "--email",
        required=True,
        help="Email address of the user"
    )
    parser.add_argument(
        "-r", "--role",
        choices=["ORGANIZER", "CORE_MEMBER"],
        default="CORE_MEMBER",
        help="Role of the user (default: CORE_MEMBER)"
    )
    parser.add_argument(
        "-n", "--name",
        default=None,
        help="Display name"
    )
    parser.add_argument(
        "--token",
        action="store_true",
        help="Print a bearer token for the user"
    )
    parser.add_argument(
        "--expires-in",
        type=int,
        default=None,
        help="Token lifetime in hours"
    )

    return parser.parse_args(argv)


def provision_user(
    email: str,
    role: str = "CORE_MEMBER",
    name: Optional[str] = None,
    with_token: bool = False,
    expires_in: Optional[int] = None,
    session_factory=None,
) -> Optional[str]:
    """
    Create or update the user and report the outcome.

    Args:
        email: User email
        role: UserRole name
        name: Display name
        with_token: Print a bearer token as well
        expires_in: Token lifetime override in hours
        session_factory: Session factory (default: SessionLocal)

    Returns:
        The user GUID, or None on error
    """
    # Import here to avoid loading database during argument parsing
    from backend.src.config.settings import get_settings
    from backend.src.models import UserRole
    from backend.src.services.exceptions import ValidationError
    from backend.src.services.token_service import TokenService
    from backend.src.services.user_service import UserService

    if session_factory is None:
        from backend.src.db.database import SessionLocal
        session_factory = SessionLocal

    db = session_factory()
    try:
        try:
            user, created = UserService(db).provision(email, role=UserRole[role], name=name)
        except ValidationError as e:
            print(f"\n[ERROR] {e.message}")
            return None

        print(f"\n[{'CREATED' if created else 'UPDATED'}] User: {user.email}")
        print(f"  GUID: {user.guid}")
        print(f"  Role: {user.role.value}")

        if with_token:
            settings = get_settings()
            if not settings.jwt_configured:
                print("\n[ERROR] JWT_SECRET_KEY is not set; cannot issue a token")
                return user.guid
            token_service = TokenService(
                db,
                settings.jwt_secret_key,
                algorithm=settings.jwt_algorithm,
                expiry_hours=settings.jwt_token_expiry_hours,
            )
            print(f"\nToken:\n{token_service.issue_token(user, expires_in_hours=expires_in)}")

        return user.guid

    except Exception as e:
        print(f"\n[ERROR] Unexpected error: {e}")
        db.rollback()
        return None
    finally:
        db.close()


def main(argv=None) -> int:
    """Main entry point."""
    signal.signal(signal.SIGINT, signal_handler)

    args = parse_args(argv)
    guid = provision_user(
        args.email,
        role=args.role,
        name=args.name,
        with_token=args.token,
        expires_in=args.expires_in,
    )
    return 0 if guid else 1


if __name__ == "__main__":
    sys.exit(main())
