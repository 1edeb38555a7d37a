"""
Create a user (e.g. an extra admin). Run from project root:
  python -m app.scripts.create_user NAME EMAIL PASSWORD [role]
Example:
  python -m app.scripts.create_user "Jane Admin" jane@example.com your-secure-password ADMIN
"""
import argparse
import sys

from pydantic import ValidationError

from app.core.database import SessionLocal
from app.models import UserRole
from app.schemas.user import UserCreate
from app.services.errors import UserServiceError, invalid_input_from
from app.services.user_store import insert_user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a user from the command line.")
    parser.add_argument("name", help="Display name (2-255 chars)")
    parser.add_argument("email", help="Unique email address")
    parser.add_argument("password", help="Password (6-128 chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=UserRole.USER.value,
        type=str.upper,
        choices=[r.value for r in UserRole],
    )
    args = parser.parse_args(argv)

    try:
        data = UserCreate(
            name=args.name,
            email=args.email,
            password=args.password,
            role=UserRole(args.role),
        )
    except ValidationError as e:
        print(invalid_input_from(e).message, file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user = insert_user(db, data)
    except UserServiceError as e:
        print(f"Could not create user '{data.email}': {e.message}", file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{user.email}' with role '{user.role.value}' (id {user.id}).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
