"""FastAPI application entrypoint. No business logic; only wiring, middleware and startup checks."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from app.api.graphql import graphql_router
from app.api.v1 import router as v1_router
from app.core.config import settings
from app.core.database import SessionLocal, engine, ping_engine
from app.services.errors import UserServiceError
from app.services.seed import seed_admin

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Refuse to start without a reachable database; optionally seed the default admin."""
    try:
        ping_engine(engine)
    except SQLAlchemyError as e:
        logger.critical("Database connection failed; shutting down: %s", e)
        raise RuntimeError("Database unreachable at startup") from e
    logger.info("Database connected")

    if settings.SEED_ADMIN_ON_STARTUP:
        db = SessionLocal()
        try:
            seed_admin(db, settings)
        except UserServiceError as e:
            logger.error("Default admin seeding failed: %s", e.message)
        finally:
            db.close()
    yield


app = FastAPI(
    title="User Management API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router, prefix=settings.API_V1_PREFIX)
app.include_router(graphql_router, prefix=settings.GRAPHQL_PATH)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "User Management API", "graphql": settings.GRAPHQL_PATH}
