"""
Main FastAPI application entry point.
Configures the application, middleware, error handlers and routes.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session

from blog_api.api.routes import auth, health, users
from blog_api.core.config import settings
from blog_api.core.errors import register_exception_handlers
from blog_api.core.logging import get_logger, setup_logging
from blog_api.db.session import engine, init_db
from blog_api.services.token_service import TokenService

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.
    Runs startup and shutdown logic.
    """
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION} ({settings.ENVIRONMENT})")

    logger.info("Creating database tables...")
    init_db()

    if settings.PURGE_EXPIRED_TOKENS_ON_STARTUP:
        with Session(engine) as session:
            TokenService.purge_expired(session)

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")
    engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    docs_url=f"{settings.API_V1_PREFIX}/docs",
    redoc_url=f"{settings.API_V1_PREFIX}/redoc",
    lifespan=lifespan,
)

# Credentials must be allowed for the refresh cookie to cross origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["authorization", "content-type", "accept"],
)

register_exception_handlers(app)

app.include_router(health.router, prefix=settings.API_V1_PREFIX)
app.include_router(auth.router, prefix=settings.API_V1_PREFIX)
app.include_router(users.router, prefix=settings.API_V1_PREFIX)
