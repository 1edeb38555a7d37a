"""Typed errors raised by the user and auth services. Each carries a message and a machine-readable code."""

from pydantic import ValidationError


class UserServiceError(Exception):
    """Base class for failures surfaced to API callers."""

    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AuthenticationError(UserServiceError):
    """Missing, invalid or expired token."""

    code = "UNAUTHENTICATED"


class InvalidCredentialsError(UserServiceError):
    """Login failed. Unknown email and wrong password are reported identically."""

    code = "INVALID_CREDENTIALS"


class AuthorizationError(UserServiceError):
    """Valid identity but insufficient role."""

    code = "FORBIDDEN"


class InvalidInputError(UserServiceError):
    code = "BAD_USER_INPUT"


class NotFoundError(UserServiceError):
    code = "NOT_FOUND"


class DuplicateEmailError(UserServiceError):
    code = "DUPLICATE_EMAIL"

    def __init__(self, message: str = "Email already exists") -> None:
        super().__init__(message)


class InternalError(UserServiceError):
    """Unclassified store failure."""

    code = "INTERNAL_SERVER_ERROR"


def invalid_input_from(exc: ValidationError) -> InvalidInputError:
    """Flatten a pydantic ValidationError into a single InvalidInputError message."""
    parts: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "__root__")
        msg = err.get("msg", "invalid value")
        # pydantic prefixes custom validator messages with "Value error, ".
        msg = msg.removeprefix("Value error, ")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return InvalidInputError("; ".join(parts) or "Invalid input")
