"""Pydantic request/response schemas for user records: create/update input, list filters, and output."""

import re
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator, model_validator

from app.core.security import (
    EMAIL_MAX_LEN,
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
)
from app.models.user import UserRole, UserStatus

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")

# Largest page size a listing request may ask for.
MAX_PAGE_SIZE = 100

PROFILE_PHOTO_MAX_LEN = 2048
LOCATION_MAX_LEN = 255

# Fields a record must always have; an update may not set them to null.
REQUIRED_FIELDS = ("name", "email", "role", "status")


def _validate_name(value: str) -> str:
    name = value.strip()
    if len(name) < NAME_MIN_LEN:
        raise ValueError(f"Name must be at least {NAME_MIN_LEN} characters long")
    if len(name) > NAME_MAX_LEN:
        raise ValueError(f"Name must be at most {NAME_MAX_LEN} characters long")
    return name


def _validate_email(value: str) -> str:
    email = value.strip()
    if len(email) > EMAIL_MAX_LEN or not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")
    return email


def format_timestamp(value: datetime) -> str:
    """ISO 8601 in UTC with millisecond precision and a Z suffix. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class UserDocument(BaseModel):
    """A complete, valid user record without its password."""

    name: str
    email: str
    role: UserRole = UserRole.USER
    status: UserStatus = UserStatus.ACTIVE
    profile_photo: str | None = Field(default=None, max_length=PROFILE_PHOTO_MAX_LEN)
    location: str | None = Field(default=None, max_length=LOCATION_MAX_LEN)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _validate_name(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _validate_email(v)


class UserCreate(UserDocument):
    """Input for signup and admin user creation."""

    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class UserUpdate(BaseModel):
    """Partial update. Only fields explicitly set are applied (see model_dump(exclude_unset=True))."""

    name: str | None = None
    email: str | None = None
    role: UserRole | None = None
    status: UserStatus | None = None
    profile_photo: str | None = Field(default=None, max_length=PROFILE_PHOTO_MAX_LEN)
    location: str | None = Field(default=None, max_length=LOCATION_MAX_LEN)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str | None) -> str | None:
        return None if v is None else _validate_name(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str | None) -> str | None:
        return None if v is None else _validate_email(v)

    @model_validator(mode="after")
    def required_fields_not_null(self) -> "UserUpdate":
        for field in REQUIRED_FIELDS:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class UserFilter(BaseModel):
    """Predicate parameters shared by the listing and the export."""

    search: str | None = None
    role: UserRole | None = None
    status: UserStatus | None = None

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()


class UserListParams(UserFilter):
    """Paged listing request; page is 1-based."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=MAX_PAGE_SIZE)


class UserOut(BaseModel):
    """User as returned to callers (no password hash)."""

    model_config = {"from_attributes": True}

    id: str
    name: str
    email: str
    role: UserRole
    status: UserStatus
    profile_photo: str | None = None
    location: str | None = None
    created_at: str

    @field_validator("created_at", mode="before")
    @classmethod
    def created_at_iso(cls, v: datetime | str) -> str:
        if isinstance(v, datetime):
            return format_timestamp(v)
        return v


class UserPage(BaseModel):
    """One page of a filtered listing."""

    users: list[UserOut]
    total_count: int
    total_pages: int
    current_page: int
