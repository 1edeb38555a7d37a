"""GraphQL API (Strawberry) mounted on FastAPI."""

from strawberry.fastapi import GraphQLRouter

from app.api.graphql.context import get_context
from app.api.graphql.schema import schema
from app.core.config import settings

graphql_router = GraphQLRouter(
    schema,
    context_getter=get_context,
    graphql_ide="graphiql" if settings.APP_ENV == "dev" else None,
)

__all__ = ["graphql_router", "schema"]
