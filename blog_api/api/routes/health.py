"""
Liveness and readiness routes, plus the API root banner.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from blog_api.core.config import settings
from blog_api.core.logging import get_logger
from blog_api.db.session import get_session

router = APIRouter(tags=["health"])

logger = get_logger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/")
def api_root() -> dict:
    """Confirms the versioned API is mounted."""
    return {
        "message": "Api v1 is running",
        "version": settings.VERSION,
        "timestamp": _now(),
        "status": "ok",
    }


@router.get("/health")
def health_check() -> dict:
    """Process liveness; touches nothing but settings."""
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
    }


@router.get("/health/db")
def database_health_check(session: Session = Depends(get_session)) -> dict:
    """
    Readiness check: round-trips ``SELECT 1`` through the session.

    Failures are reported in the body with the exception type only, so
    connection strings never leak to the caller.
    """
    try:
        session.connection().execute(text("SELECT 1")).scalar_one()
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "status": "unhealthy",
            "database": "error",
            "error": type(e).__name__,
            "timestamp": _now(),
        }
    return {"status": "healthy", "database": "ok", "timestamp": _now()}
