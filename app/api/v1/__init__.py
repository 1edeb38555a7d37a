"""API v1 REST routes (operational endpoints; user operations are served over GraphQL)."""

from fastapi import APIRouter

from app.api.v1 import health

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
