"""Shared helpers: in-memory SQLite store and user fixtures."""

from datetime import datetime, timedelta, timezone
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import hash_password
from app.models import Base, User, UserRole, UserStatus
from app.schemas.auth import CurrentUser

PASSWORD = "secret123"
BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_session_factory() -> sessionmaker:
    """Fresh in-memory database with the users table; one shared connection."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@lru_cache
def password_hash() -> str:
    """bcrypt hash of PASSWORD, computed once per test run."""
    return hash_password(PASSWORD)


def add_user(
    db: Session,
    name: str,
    email: str,
    role: UserRole = UserRole.USER,
    status: UserStatus = UserStatus.ACTIVE,
    created_at: datetime | None = None,
    **fields: object,
) -> User:
    user = User(
        name=name,
        email=email,
        password_hash=password_hash(),
        role=role,
        status=status,
        created_at=created_at or datetime.now(timezone.utc),
        **fields,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def seed_scenario(db: Session) -> list[User]:
    """
    25 users, one second apart: 5 ADMIN/ACTIVE then 20 USER where every third
    one (i % 3 == 0) is INACTIVE.
    """
    users = []
    for i in range(5):
        users.append(
            add_user(
                db,
                name=f"Admin {i}",
                email=f"admin{i}@example.com",
                role=UserRole.ADMIN,
                status=UserStatus.ACTIVE,
                created_at=BASE_TIME + timedelta(seconds=i),
            )
        )
    for i in range(20):
        users.append(
            add_user(
                db,
                name=f"Member {i}",
                email=f"member{i}@example.org",
                role=UserRole.USER,
                status=UserStatus.INACTIVE if i % 3 == 0 else UserStatus.ACTIVE,
                created_at=BASE_TIME + timedelta(seconds=5 + i),
            )
        )
    return users


def admin_claims(user_id: str = "admin-id") -> CurrentUser:
    return CurrentUser(id=user_id, role=UserRole.ADMIN)


def user_claims(user_id: str = "user-id") -> CurrentUser:
    return CurrentUser(id=user_id, role=UserRole.USER)
