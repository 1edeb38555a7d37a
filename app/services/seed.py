"""Seed data: the default admin account and a batch of mock users for local development."""

import logging
from datetime import timezone
from typing import TYPE_CHECKING

from faker import Faker
from sqlalchemy.orm import Session

from app.core.security import hash_password
from app.models import User, UserRole, UserStatus
from app.schemas.user import UserCreate
from app.services.user_store import find_by_email, insert_user, store_errors

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

LOCATIONS = (
    "New York, USA",
    "London, UK",
    "Tokyo, Japan",
    "Sydney, Australia",
    "Berlin, Germany",
    "Paris, France",
    "Toronto, Canada",
    "Singapore",
    "Dubai, UAE",
    "Mumbai, India",
)


PORTRAIT_URL = "https://randomuser.me/api/portraits/{gender}/{index}.jpg"

BATCH_SIZE = 25
# seed_users is a no-op once more than this many users exist.
EXISTING_USERS_THRESHOLD = 10


def seed_admin(db: Session, settings: "Settings") -> bool:
    """Create the default admin if no user has DEFAULT_ADMIN_EMAIL. Returns True when created."""
    with store_errors(db):
        if find_by_email(db, settings.DEFAULT_ADMIN_EMAIL) is not None:
            return False
    insert_user(
        db,
        UserCreate(
            name="Admin",
            email=settings.DEFAULT_ADMIN_EMAIL,
            password=settings.DEFAULT_ADMIN_PASSWORD.get_secret_value(),
            role=UserRole.ADMIN,
            status=UserStatus.ACTIVE,
            location="Headquarters",
            profile_photo=PORTRAIT_URL.format(gender="men", index=75),
        ),
    )
    logger.info("Default admin user created", extra={"email": settings.DEFAULT_ADMIN_EMAIL})
    return True


def build_mock_users(count: int, fake: Faker) -> list[User]:
    """
    count mock users: the first count // 15 are ADMIN (ACTIVE with p=0.8), the rest USER (p=0.7).

    Admins get the password admin<N>123; regular users share one Faker-generated password
    that is never shown. Join dates fall within the past two years.
    """
    admin_count = count // 15
    shared_hash = hash_password(fake.password(length=16))
    users: list[User] = []
    for i in range(count):
        joined = fake.date_time_between(start_date="-2y", end_date="now", tzinfo=timezone.utc)
        if i < admin_count:
            n = i + 1
            users.append(
                User(
                    name=f"Admin {n}",
                    email=f"admin{n}@example.com",
                    password_hash=hash_password(f"admin{n}123"),
                    role=UserRole.ADMIN,
                    status=UserStatus.ACTIVE if fake.random.random() > 0.2 else UserStatus.INACTIVE,
                    location=fake.random_element(LOCATIONS),
                    profile_photo=PORTRAIT_URL.format(gender="men", index=n),
                    created_at=joined,
                )
            )
            continue
        first = fake.first_name()
        last = fake.last_name()
        users.append(
            User(
                name=f"{first} {last}",
                # index suffix keeps addresses unique when Faker repeats a name
                email=f"{first}.{last}{i}@{fake.safe_domain_name()}".lower().replace(" ", ""),
                password_hash=shared_hash,
                role=UserRole.USER,
                status=UserStatus.ACTIVE if fake.random.random() > 0.3 else UserStatus.INACTIVE,
                location=fake.random_element(LOCATIONS),
                profile_photo=PORTRAIT_URL.format(
                    gender=fake.random_element(("men", "women")), index=i % 50
                ),
                created_at=joined,
            )
        )
    return users


def seeded_faker(seed: int | None = None) -> Faker:
    """Faker instance; a fixed seed gives reproducible mock data."""
    fake = Faker()
    if seed is not None:
        fake.seed_instance(seed)
    return fake


def seed_users(db: Session, count: int = 150, fake: Faker | None = None) -> int:
    """Insert count mock users in batches unless the table already has data. Returns the number inserted."""
    with store_errors(db):
        existing = db.query(User).count()
    if existing > EXISTING_USERS_THRESHOLD:
        logger.info("Users already seeded", extra={"existing_count": existing})
        return 0

    users = build_mock_users(count, fake or seeded_faker())
    batches = (len(users) + BATCH_SIZE - 1) // BATCH_SIZE
    logger.info("Seeding %s mock users", len(users))
    for n, start in enumerate(range(0, len(users), BATCH_SIZE), start=1):
        with store_errors(db):
            db.add_all(users[start : start + BATCH_SIZE])
            db.commit()
        logger.info("Inserted batch %s of %s", n, batches)
    return len(users)
