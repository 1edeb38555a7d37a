"""Request/response schemas for auth operations."""

from pydantic import BaseModel, Field

from app.core.security import EMAIL_MAX_LEN, PASSWORD_MAX_LEN
from app.models.user import UserRole
from app.schemas.user import UserOut


class LoginRequest(BaseModel):
    """Credentials for login. Blank values are not rejected here; they fail as invalid credentials."""

    email: str = Field(..., max_length=EMAIL_MAX_LEN, description="Email")
    password: str = Field(..., max_length=PASSWORD_MAX_LEN, description="Password")


class AuthResult(BaseModel):
    """Signed token plus the authenticated user."""

    token: str = Field(..., description="JWT access token")
    user: UserOut


class CurrentUser(BaseModel):
    """Claims of a verified token (id, role), passed explicitly into service calls."""

    id: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
