"""Account credentials: bcrypt password hashes and the bearer tokens issued at login."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from app.core.config import settings

BCRYPT_ROUNDS = 12
# bcrypt only reads the first 72 bytes of a password.
BCRYPT_MAX_BYTES = 72

# Login input bounds, shared by POST /auth and the create_account script.
EMAIL_MIN_LEN = 3
EMAIL_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# Every access token names the account (sub) and the role it held at login.
REQUIRED_CLAIMS = ("sub", "role", "exp", "iat")


def _password_bytes(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(plain_password: str) -> str:
    """bcrypt hash for accounts.password_hash."""
    return bcrypt.hashpw(
        _password_bytes(plain_password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    ).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Check a login password. Accounts created without a password hash can never log in."""
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(account_id: str, role: str) -> str:
    """Issue a bearer token for account_id, valid for JWT_EXPIRE_MINUTES."""
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": account_id,
        "role": role,
        "exp": now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
        "iat": now,
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Validate a bearer token and return its claims.

    Raises jwt.PyJWTError when the signature or expiry is invalid or a required claim is missing.
    The role claim is informational; get_current_actor re-reads the role from the accounts table.
    """
    return jwt.decode(
        token,
        settings.JWT_SECRET.get_secret_value(),
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": list(REQUIRED_CLAIMS)},
    )
