"""
API error taxonomy and the FastAPI exception handlers that render it.

Every error leaves the service as ``{status, code, message, error?, errors?}``.
"""

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi import status as http_status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from blog_api.core.logging import get_logger

logger = get_logger(__name__)


class APIError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = http_status.HTTP_500_INTERNAL_SERVER_ERROR
    status: str = "error"
    code: str = "ServerError"
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        error: Optional[str] = None,
        errors: Optional[dict[str, str]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.error = error
        self.errors = errors
        super().__init__(self.message)

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "status": self.status,
            "code": self.code,
            "message": self.message,
        }
        if self.error is not None:
            body["error"] = self.error
        if self.errors is not None:
            body["errors"] = self.errors
        return body

    @property
    def headers(self) -> Optional[dict[str, str]]:
        return None


class ValidationError(APIError):
    """Request failed validation (400)."""

    status_code = http_status.HTTP_400_BAD_REQUEST
    code = "ValidationError"
    default_message = "Validation failed"


class AuthenticationError(APIError):
    """Missing, wrong or revoked credentials (401)."""

    status_code = http_status.HTTP_401_UNAUTHORIZED
    code = "AuthenticationError"
    default_message = "Authentication required"

    @property
    def headers(self) -> Optional[dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class AuthorizationError(APIError):
    """Authenticated but not permitted (403)."""

    status_code = http_status.HTTP_403_FORBIDDEN
    status = "AuthorizationError"
    code = "AuthorizationError"
    default_message = "Not enough permissions"


class ServerError(APIError):
    """Persistence or cryptographic failure (500)."""


def _field_name(loc: tuple[Any, ...]) -> str:
    # ("body", "email") -> "email"; ("cookie", "refreshToken") -> "refreshToken"
    parts = [str(part) for part in loc[1:]] or [str(part) for part in loc]
    return ".".join(parts)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Render an APIError raised anywhere below the routing layer."""
    if exc.status_code >= 500:
        logger.error(
            f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
            extra={"event": "http.error", "code": exc.code, "path": request.url.path},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_body(),
        headers=exc.headers,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Re-render FastAPI's 422 as a 400 with one message per field."""
    errors: dict[str, str] = {}
    for err in exc.errors():
        field = _field_name(tuple(err.get("loc", ())))
        # First failure per field wins, like a validation chain
        errors.setdefault(field, err.get("msg", "Invalid value"))
    return JSONResponse(
        status_code=http_status.HTTP_400_BAD_REQUEST,
        content=ValidationError(errors=errors).to_body(),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the failure and hide its details from the client."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ServerError().to_body(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error handlers on the application."""
    app.add_exception_handler(APIError, api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
