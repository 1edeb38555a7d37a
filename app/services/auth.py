"""Auth service: credential checks, signup, token verification and role guards."""

import logging

import jwt
from sqlalchemy.orm import Session

from app.core.security import create_access_token, decode_access_token, verify_password
from app.models.user import UserRole, UserStatus
from app.schemas.auth import AuthResult, CurrentUser, LoginRequest
from app.schemas.user import UserCreate
from app.services.errors import (
    AuthenticationError,
    AuthorizationError,
    InvalidCredentialsError,
)
from app.services.user_store import find_by_email, insert_user, store_errors, to_user_out

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


def login(db: Session, credentials: LoginRequest) -> AuthResult:
    """
    Check email and password; return a 1-hour token over {id, role} plus the user.

    Unknown email and wrong password raise the same InvalidCredentialsError.
    """
    with store_errors(db):
        user = find_by_email(db, credentials.email.strip())
    if user is None or not verify_password(credentials.password, user.password_hash):
        logger.info("Login failed")
        raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)
    token = create_access_token(sub=user.id, role=user.role.value)
    return AuthResult(token=token, user=to_user_out(user))


def signup(db: Session, data: UserCreate) -> AuthResult:
    """Register a new USER/ACTIVE account; role and status in the input are ignored."""
    data = data.model_copy(update={"role": UserRole.USER, "status": UserStatus.ACTIVE})
    user = insert_user(db, data)
    token = create_access_token(sub=user.id, role=user.role.value)
    return AuthResult(token=token, user=to_user_out(user))


def verify_token(token: str) -> CurrentUser:
    """Check signature and expiry only; return the claims as CurrentUser."""
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError as e:
        raise AuthenticationError("Invalid or expired token") from e
    sub = payload.get("sub")
    role = str(payload.get("role") or "").upper()
    if not sub or role not in UserRole.__members__:
        raise AuthenticationError("Invalid token payload")
    return CurrentUser(id=str(sub), role=UserRole(role))


def authenticate(token: str | None) -> CurrentUser:
    """Resolve the bearer token of a request into claims. Raises AuthenticationError if it is absent."""
    if not token:
        raise AuthenticationError("Authorization header missing")
    return verify_token(token)


def require_admin(current_user: CurrentUser) -> CurrentUser:
    """Raise AuthorizationError unless the caller has role ADMIN."""
    if not current_user.is_admin:
        raise AuthorizationError("Admin access required")
    return current_user
