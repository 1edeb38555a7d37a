"""Per-request GraphQL context: DB session, settings and the caller's bearer token."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from strawberry.fastapi import BaseContext

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.schemas.auth import CurrentUser
from app.services.auth import authenticate

security = HTTPBearer(auto_error=False)


class GraphQLContext(BaseContext):
    """
    Request-scoped dependencies for resolvers.

    The token is only verified when a resolver calls authenticate(), so login
    and signup work without (or with a stale) Authorization header.
    """

    def __init__(self, db: Session, settings: Settings, token: str | None) -> None:
        super().__init__()
        self.db = db
        self.settings = settings
        self.token = token

    def authenticate(self) -> CurrentUser:
        """Claims of the caller's token. Raises AuthenticationError if missing, invalid or expired."""
        return authenticate(self.token)


def get_context(
    db: Annotated[Session, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> GraphQLContext:
    """FastAPI dependency building the GraphQL context for one request."""
    return GraphQLContext(
        db=db,
        settings=get_settings(),
        token=credentials.credentials if credentials is not None else None,
    )
