"""GraphQL schema: user listing/export queries and auth/CRUD mutations."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TypeVar

import strawberry
from fastapi.concurrency import run_in_threadpool
from graphql import GraphQLError
from pydantic import BaseModel, ValidationError
from strawberry.types import ExecutionContext, Info

from app.api.graphql.context import GraphQLContext
from app.api.graphql.types import (
    AuthPayload,
    CreateUserInput,
    Role,
    Status,
    UpdateUserInput,
    UserConnection,
    UserType,
)
from app.schemas.auth import LoginRequest
from app.schemas.user import UserCreate, UserFilter, UserListParams, UserUpdate
from app.services import auth as auth_service
from app.services import users as users_service
from app.services.errors import UserServiceError, invalid_input_from

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Error codes that describe a bad request rather than a server fault; not logged as errors.
EXPECTED_ERROR_CODES = frozenset(
    {
        "UNAUTHENTICATED",
        "INVALID_CREDENTIALS",
        "FORBIDDEN",
        "BAD_USER_INPUT",
        "NOT_FOUND",
        "DUPLICATE_EMAIL",
    }
)

Ctx = Info[GraphQLContext, None]


@contextmanager
def service_errors() -> Iterator[None]:
    """Re-raise service errors as GraphQL errors with extensions.code set to the error kind."""
    try:
        yield
    except UserServiceError as e:
        raise GraphQLError(e.message, extensions={"code": e.code}) from e


def parse_input(model: type[ModelT], data: dict) -> ModelT:
    """Validate raw arguments against a request model; failures become InvalidInputError."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise invalid_input_from(e) from e


@strawberry.type
class Query:
    @strawberry.field
    async def users(
        self,
        info: Ctx,
        page: int,
        limit: int,
        search: str | None = None,
        role: Role | None = None,
        status: Status | None = None,
    ) -> UserConnection:
        with service_errors():
            current_user = info.context.authenticate()
            params = parse_input(
                UserListParams,
                {"page": page, "limit": limit, "search": search, "role": role, "status": status},
            )
            page_result = await run_in_threadpool(
                users_service.list_users, info.context.db, current_user, params
            )
            return UserConnection.from_page(page_result)

    @strawberry.field
    async def user(self, info: Ctx, id: strawberry.ID) -> UserType | None:
        with service_errors():
            current_user = info.context.authenticate()
            found = await run_in_threadpool(
                users_service.get_user, info.context.db, current_user, str(id)
            )
            return UserType.from_out(found)

    @strawberry.field
    async def export_users(
        self,
        info: Ctx,
        search: str | None = None,
        role: Role | None = None,
        status: Status | None = None,
    ) -> list[UserType]:
        with service_errors():
            current_user = info.context.authenticate()
            filters = parse_input(UserFilter, {"search": search, "role": role, "status": status})
            rows = await run_in_threadpool(
                users_service.export_users,
                info.context.db,
                current_user,
                filters,
                admin_only=info.context.settings.EXPORT_REQUIRES_ADMIN,
            )
            return [UserType.from_out(u) for u in rows]


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def login(self, info: Ctx, email: str, password: str) -> AuthPayload:
        with service_errors():
            credentials = parse_input(LoginRequest, {"email": email, "password": password})
            result = await run_in_threadpool(auth_service.login, info.context.db, credentials)
            return AuthPayload.from_result(result)

    @strawberry.mutation
    async def signup(self, info: Ctx, input: CreateUserInput) -> AuthPayload:
        with service_errors():
            data = parse_input(UserCreate, input.to_dict())
            result = await run_in_threadpool(auth_service.signup, info.context.db, data)
            return AuthPayload.from_result(result)

    @strawberry.mutation
    async def create_user(self, info: Ctx, input: CreateUserInput) -> UserType:
        with service_errors():
            current_user = info.context.authenticate()
            data = parse_input(UserCreate, input.to_dict())
            created = await run_in_threadpool(
                users_service.create_user, info.context.db, current_user, data
            )
            return UserType.from_out(created)

    @strawberry.mutation
    async def update_user(self, info: Ctx, id: strawberry.ID, input: UpdateUserInput) -> UserType:
        with service_errors():
            current_user = info.context.authenticate()
            data = parse_input(UserUpdate, input.to_dict())
            updated = await run_in_threadpool(
                users_service.update_user, info.context.db, current_user, str(id), data
            )
            return UserType.from_out(updated)

    @strawberry.mutation
    async def delete_user(self, info: Ctx, id: strawberry.ID) -> bool:
        with service_errors():
            current_user = info.context.authenticate()
            return await run_in_threadpool(
                users_service.delete_user, info.context.db, current_user, str(id)
            )

    @strawberry.mutation
    async def delete_multiple_users(self, info: Ctx, ids: list[strawberry.ID]) -> bool:
        with service_errors():
            current_user = info.context.authenticate()
            await run_in_threadpool(
                users_service.delete_users, info.context.db, current_user, [str(i) for i in ids]
            )
            return True


class UserAdminSchema(strawberry.Schema):
    """Schema that only logs errors which are not expected request failures."""

    def process_errors(
        self,
        errors: list[GraphQLError],
        execution_context: ExecutionContext | None = None,
    ) -> None:
        unexpected = [
            e for e in errors if (e.extensions or {}).get("code") not in EXPECTED_ERROR_CODES
        ]
        if unexpected:
            super().process_errors(unexpected, execution_context)


schema = UserAdminSchema(query=Query, mutation=Mutation)
