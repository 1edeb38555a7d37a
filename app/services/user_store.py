"""Credential store: user record lookups and writes, with store failures mapped to typed errors."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.security import hash_password
from app.models import User
from app.schemas.user import UserCreate, UserOut
from app.services.errors import DuplicateEmailError, InternalError

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(db: Session) -> Iterator[None]:
    """
    Roll back and translate SQLAlchemy failures raised inside the block.

    IntegrityError can only come from the unique email index, so it becomes
    DuplicateEmailError; anything else becomes InternalError.
    """
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        raise DuplicateEmailError() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("User store operation failed")
        raise InternalError("Internal database error") from e


def get_by_id(db: Session, user_id: str) -> User | None:
    return db.get(User, str(user_id))


def find_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def email_taken(db: Session, email: str, exclude_id: str | None = None) -> bool:
    """True if another record already uses email."""
    query = db.query(User.id).filter(User.email == email)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


def insert_user(db: Session, data: UserCreate) -> User:
    """Hash the password and persist a new record. Raises DuplicateEmailError if the email is taken."""
    with store_errors(db):
        if email_taken(db, data.email):
            raise DuplicateEmailError()
        user = User(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password),
            role=data.role,
            status=data.status,
            profile_photo=data.profile_photo,
            location=data.location,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
    logger.info("User created", extra={"user_id": user.id, "role": user.role.value})
    return user


def to_user_out(user: User) -> UserOut:
    return UserOut.model_validate(user)
