"""JWT login and auth dependencies (get_current_actor, require_admin)."""

from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.security import (
    EMAIL_MAX_LEN,
    EMAIL_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    create_access_token,
    decode_access_token,
    verify_password,
)
from app.models import Account
from app.schemas.account import ADMIN_ROLES, Actor
from app.schemas.auth import CurrentActor, LoginRequest, TokenResponse

router = APIRouter()
security = HTTPBearer(auto_error=False)

# Identity used for every request when AUTH_ENABLED is False (local development only).
DEV_ACTOR = CurrentActor(id="system", email="system@localhost", role="super_admin")


def _validate_email(email: str) -> None:
    if not (EMAIL_MIN_LEN <= len(email) <= EMAIL_MAX_LEN) or "@" not in email:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invalid email.",
        )


def _validate_password(password: str) -> None:
    if not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invalid password length.",
        )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("", response_model=TokenResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """
    Authenticate with email and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    email = body.email.strip().lower()
    _validate_email(email)
    _validate_password(body.password)

    account = db.query(Account).filter(Account.email == email).first()
    if account is None or not verify_password(body.password, account.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )
    token = create_access_token(account_id=account.id, role=account.role)
    return TokenResponse(access_token=token, token_type="bearer")


def get_current_actor(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentActor:
    """
    Dependency: require valid Bearer JWT and return the current account. Raises 401 if missing or invalid.

    The role is read from the accounts table, not the token, so a role change applies on the next request.
    """
    if not get_settings().AUTH_ENABLED:
        return DEV_ACTOR
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    account_id = payload.get("sub")
    if not account_id:
        raise _unauthorized("Invalid token payload")
    account = db.query(Account).filter(Account.id == str(account_id)).first()
    if account is None:
        raise _unauthorized("Account not found")
    return CurrentActor(id=account.id, email=account.email, role=account.role)


def require_admin(
    current: Annotated[CurrentActor, Depends(get_current_actor)],
) -> CurrentActor:
    """Dependency: require role 'admin' or 'super_admin'. Raises 403 otherwise."""
    if current.role not in ADMIN_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current


def to_actor(current: CurrentActor) -> Actor:
    """Narrow the authenticated account to the (id, role) pair the engine evaluates."""
    return Actor(id=current.id, role=current.role)
