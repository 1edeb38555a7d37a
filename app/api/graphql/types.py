"""GraphQL object and input types for users and auth."""

from typing import Any

import strawberry
from strawberry import UNSET

from app.models.user import UserRole, UserStatus
from app.schemas.auth import AuthResult
from app.schemas.user import UserOut, UserPage

Role = strawberry.enum(UserRole, name="Role")
Status = strawberry.enum(UserStatus, name="Status")


@strawberry.type(name="User")
class UserType:
    id: strawberry.ID
    name: str
    email: str
    role: Role
    status: Status
    profile_photo: str | None
    location: str | None
    created_at: str

    @classmethod
    def from_out(cls, user: UserOut) -> "UserType":
        return cls(
            id=strawberry.ID(user.id),
            name=user.name,
            email=user.email,
            role=user.role,
            status=user.status,
            profile_photo=user.profile_photo,
            location=user.location,
            created_at=user.created_at,
        )


@strawberry.type
class UserConnection:
    users: list[UserType]
    total_pages: int
    current_page: int
    total_count: int

    @classmethod
    def from_page(cls, page: UserPage) -> "UserConnection":
        return cls(
            users=[UserType.from_out(u) for u in page.users],
            total_pages=page.total_pages,
            current_page=page.current_page,
            total_count=page.total_count,
        )


@strawberry.type
class AuthPayload:
    token: str
    user: UserType

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthPayload":
        return cls(token=result.token, user=UserType.from_out(result.user))


@strawberry.input
class CreateUserInput:
    name: str
    email: str
    password: str
    role: Role | None = None
    status: Status | None = None
    profile_photo: str | None = None
    location: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Set fields only; a null role/status falls back to the schema default."""
        data = {
            "name": self.name,
            "email": self.email,
            "password": self.password,
            "role": self.role,
            "status": self.status,
            "profile_photo": self.profile_photo,
            "location": self.location,
        }
        return {k: v for k, v in data.items() if v is not None}


@strawberry.input
class UpdateUserInput:
    name: str | None = UNSET
    email: str | None = UNSET
    role: Role | None = UNSET
    status: Status | None = UNSET
    profile_photo: str | None = UNSET
    location: str | None = UNSET

    def to_dict(self) -> dict[str, Any]:
        """Only the fields present in the request, explicit nulls included."""
        fields = ("name", "email", "role", "status", "profile_photo", "location")
        return {f: getattr(self, f) for f in fields if getattr(self, f) is not UNSET}
