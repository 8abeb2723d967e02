#!/usr/bin/env python3
"""Create or update the platform administrator account.

The account is created verified, with the admin role and a paid plan. If
an account with the email already exists it is promoted and its password
reset.

Usage:
    python scripts/seed_admin.py --email admin@example.com --password '...'

The password may also be supplied through ADMIN_PASSWORD.
"""

import argparse
import os
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlmodel import Session  # noqa: E402

from app.core.security import hash_password  # noqa: E402
from app.user.models import PlanStatus, User, UserRole  # noqa: E402
from app.user.service import get_user_by_email  # noqa: E402

DEFAULT_EMAIL = "admin@admin.com"
DEFAULT_FULL_NAME = "System Administrator"


def seed_admin(
    session: Session, email: str, password: str, full_name: str = DEFAULT_FULL_NAME
) -> tuple[User, bool]:
    """Upsert the admin account. Returns the user and whether it was created."""
    user = get_user_by_email(session, email)
    created = user is None
    if user is None:
        user = User(email=email)

    user.password_hash = hash_password(password)
    user.full_name = full_name
    user.role = UserRole.admin
    user.email_verified = True
    user.email_verification_otp = None
    user.otp_expires_at = None
    user.plan_status = PlanStatus.paid

    session.add(user)
    session.commit()
    session.refresh(user)
    return user, created


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--email", default=DEFAULT_EMAIL)
    parser.add_argument("--password", default=os.environ.get("ADMIN_PASSWORD"))
    parser.add_argument("--full-name", default=DEFAULT_FULL_NAME)
    args = parser.parse_args(argv)

    if not args.password:
        print("A password is required (--password or ADMIN_PASSWORD)")
        return 1
    if len(args.password) < 8:
        print("The password must be at least 8 characters")
        return 1

    from app.db.engine import engine

    print("Seeding admin user...")
    with Session(engine) as session:
        user, created = seed_admin(session, args.email, args.password, args.full_name)

    print(f"  ✓ Admin user {'created' if created else 'updated'}: {user.email}")
    print(f"  ID: {user.id}")
    print(f"  Role: {user.role.value}")
    print(f"  Plan Status: {user.plan_status.value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
