"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.user import User, UserRole, UserStatus

__all__ = ["Base", "User", "UserRole", "UserStatus"]
