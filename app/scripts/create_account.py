"""
Create a directory account (e.g. the first super admin). Run from project root:
  python -m app.scripts.create_account EMAIL PASSWORD NAME [--phone PHONE] [--role ROLE]
Example:
  python -m app.scripts.create_account owner@example.com your-secure-password "Site Owner" --role super_admin

Accounts created with a role other than 'user' are recorded as assigned by 'system'.
"""
import argparse
import logging
import sys
from datetime import UTC, datetime

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.logging import configure_logging
from app.core.security import hash_password
from app.models import Account
from app.schemas.account import ROLE_VALUES

SYSTEM_ASSIGNER = "system"

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a directory account (no registration UI).")
    parser.add_argument("email", help="Email used to log in (3-255 chars)")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument("name", help="Display name")
    parser.add_argument("--phone", default="", help="Phone number")
    parser.add_argument("--role", default="user", choices=sorted(ROLE_VALUES))
    args = parser.parse_args()

    configure_logging(get_settings())

    email = args.email.strip().lower()
    if len(email) < 3 or len(email) > 255 or "@" not in email:
        print("Invalid email.", file=sys.stderr)
        return 1
    if len(args.password) < 8 or len(args.password) > 128:
        print("Password must be 8-128 characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        existing = db.query(Account).filter(Account.email == email).first()
        if existing:
            print(f"Account '{email}' already exists.", file=sys.stderr)
            return 1
        account = Account(
            email=email,
            name=args.name.strip(),
            phone=args.phone.strip(),
            password_hash=hash_password(args.password),
            kyc_status="pending",
            role=args.role,
        )
        if args.role != "user":
            account.role_assigned_by = SYSTEM_ASSIGNER
            account.role_assigned_at = datetime.now(UTC)
        db.add(account)
        db.commit()
        logger.info("Account created", extra={"account_id": account.id, "role": args.role})
        print(f"Created account '{email}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
