"""User listing, export and admin CRUD. Every function takes the caller's claims explicitly."""

import logging
import math

from pydantic import ValidationError
from sqlalchemy import ColumnElement, or_
from sqlalchemy.orm import Query, Session

from app.models import User
from app.schemas.auth import CurrentUser
from app.schemas.user import (
    UserCreate,
    UserDocument,
    UserFilter,
    UserListParams,
    UserOut,
    UserPage,
    UserUpdate,
)
from app.services.auth import require_admin
from app.services.errors import (
    DuplicateEmailError,
    InvalidInputError,
    NotFoundError,
    invalid_input_from,
)
from app.services.user_store import (
    email_taken,
    get_by_id,
    insert_user,
    store_errors,
    to_user_out,
)

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def _like_pattern(term: str) -> str:
    """Substring LIKE pattern with %, _ and the escape char matched literally."""
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def build_predicate(filters: UserFilter) -> list[ColumnElement[bool]]:
    """
    Conditions for a listing: case-insensitive substring on name OR email when
    search is set, equality on role and status when set. Combined with AND.
    """
    conditions: list[ColumnElement[bool]] = []
    if filters.search:
        pattern = _like_pattern(filters.search)
        conditions.append(
            or_(
                User.name.ilike(pattern, escape=LIKE_ESCAPE),
                User.email.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    if filters.role is not None:
        conditions.append(User.role == filters.role)
    if filters.status is not None:
        conditions.append(User.status == filters.status)
    return conditions


def _filtered(db: Session, filters: UserFilter) -> Query:
    return db.query(User).filter(*build_predicate(filters))


def _newest_first(query: Query) -> Query:
    # id breaks created_at ties so pages never overlap.
    return query.order_by(User.created_at.desc(), User.id.desc())


def total_pages(total_count: int, limit: int) -> int:
    """ceil(total_count / limit); 0 when nothing matches."""
    return math.ceil(total_count / limit)


def list_users(db: Session, current_user: CurrentUser, params: UserListParams) -> UserPage:
    """One page of matching users, newest first, plus total count and page count. Any authenticated caller."""
    with store_errors(db):
        query = _filtered(db, params)
        total_count = query.count()
        rows = (
            _newest_first(query)
            .offset((params.page - 1) * params.limit)
            .limit(params.limit)
            .all()
        )
    return UserPage(
        users=[to_user_out(u) for u in rows],
        total_count=total_count,
        total_pages=total_pages(total_count, params.limit),
        current_page=params.page,
    )


def export_users(
    db: Session,
    current_user: CurrentUser,
    filters: UserFilter,
    admin_only: bool = False,
) -> list[UserOut]:
    """All users matching filters, newest first, unpaginated."""
    if admin_only:
        require_admin(current_user)
    with store_errors(db):
        rows = _newest_first(_filtered(db, filters)).all()
    return [to_user_out(u) for u in rows]


def get_user(db: Session, current_user: CurrentUser, user_id: str) -> UserOut:
    """Single user by id (ADMIN only)."""
    require_admin(current_user)
    with store_errors(db):
        user = get_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return to_user_out(user)


def create_user(db: Session, current_user: CurrentUser, data: UserCreate) -> UserOut:
    """Create a user (ADMIN only); role and status default to USER and ACTIVE."""
    require_admin(current_user)
    return to_user_out(insert_user(db, data))


def update_user(
    db: Session,
    current_user: CurrentUser,
    user_id: str,
    data: UserUpdate,
) -> UserOut:
    """
    Apply the fields set on data to an existing user (ADMIN only).

    The merged record is validated again before it is written, and moving to
    an email held by another user raises DuplicateEmailError.
    """
    require_admin(current_user)
    changes = data.model_dump(exclude_unset=True)
    with store_errors(db):
        user = get_by_id(db, user_id)
        if user is None:
            raise NotFoundError("User not found")

        merged = {
            "name": user.name,
            "email": user.email,
            "role": user.role,
            "status": user.status,
            "profile_photo": user.profile_photo,
            "location": user.location,
        }
        merged.update(changes)
        try:
            document = UserDocument.model_validate(merged)
        except ValidationError as e:
            raise invalid_input_from(e) from e

        if document.email != user.email and email_taken(db, document.email, exclude_id=user.id):
            raise DuplicateEmailError()

        for field in changes:
            setattr(user, field, getattr(document, field))
        db.commit()
        db.refresh(user)
    logger.info("User updated", extra={"user_id": user.id, "fields": sorted(changes)})
    return to_user_out(user)


def delete_user(db: Session, current_user: CurrentUser, user_id: str) -> bool:
    """Delete one user (ADMIN only)."""
    require_admin(current_user)
    with store_errors(db):
        user = get_by_id(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        db.delete(user)
        db.commit()
    logger.info("User deleted", extra={"user_id": str(user_id)})
    return True


def delete_users(db: Session, current_user: CurrentUser, ids: list[str]) -> int:
    """
    Delete every user whose id is in ids with a single statement (ADMIN only).

    Returns the number deleted. Raises InvalidInputError for an empty list and
    NotFoundError when nothing matched; a partial match is logged, not raised.
    """
    require_admin(current_user)
    if not ids:
        raise InvalidInputError("No user IDs provided")
    unique_ids = list(dict.fromkeys(str(i) for i in ids))
    with store_errors(db):
        deleted = (
            db.query(User)
            .filter(User.id.in_(unique_ids))
            .delete(synchronize_session=False)
        )
        db.commit()
    if deleted == 0:
        raise NotFoundError("No users found with the provided IDs")
    if deleted < len(unique_ids):
        logger.warning(
            "Only %s out of %s users were deleted",
            deleted,
            len(unique_ids),
            extra={"requested_count": len(unique_ids), "deleted_count": deleted},
        )
    else:
        logger.info("Users deleted", extra={"deleted_count": deleted})
    return deleted
