"""Pydantic request/response schemas."""

from app.schemas.auth import AuthResult, CurrentUser, LoginRequest
from app.schemas.health import HealthResponse
from app.schemas.user import (
    UserCreate,
    UserDocument,
    UserFilter,
    UserListParams,
    UserOut,
    UserPage,
    UserUpdate,
)

__all__ = [
    "AuthResult",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "UserCreate",
    "UserDocument",
    "UserFilter",
    "UserListParams",
    "UserOut",
    "UserPage",
    "UserUpdate",
]
