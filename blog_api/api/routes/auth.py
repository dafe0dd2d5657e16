"""
Authentication routes for registration, login, token refresh and logout.

The access token is returned in the body; the refresh token only ever
travels in an HttpOnly cookie.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Cookie, Depends, Response
from sqlmodel import Session

from blog_api.api.deps import get_auth_service
from blog_api.core.config import settings
from blog_api.core.errors import ValidationError
from blog_api.db.session import get_session
from blog_api.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from blog_api.schemas.token import RefreshResponse, StatusResponse, TokenData
from blog_api.schemas.user import UserPublic
from blog_api.services.auth_service import AuthResult, AuthService
from blog_api.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])

REFRESH_COOKIE_NAME = "refreshToken"


def _set_refresh_cookie(response: Response, refresh_token: str) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=refresh_token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def _auth_response(result: AuthResult, message: str) -> AuthResponse:
    return AuthResponse(
        user=UserPublic.model_validate(result.user),
        access_token=result.access_token,
        message=message,
    )


@router.post("/register", response_model=AuthResponse)
def register(
    user_in: RegisterRequest,
    response: Response,
    session: Annotated[Session, Depends(get_session)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    """
    Register a new user and start their first session.

    Args:
        user_in: Email, password and optional role
        response: Response used to set the refresh cookie
        session: Database session
        auth_service: Authentication service

    Returns:
        User projection and access token

    Raises:
        ValidationError: If the email is already registered
        AuthorizationError: If the admin role is requested off the allowlist
        ServerError: If the user could not be persisted
    """
    if UserService.email_exists(session, user_in.email):
        raise ValidationError(errors={"email": "Email already exists"})

    result = auth_service.register(user_in.email, user_in.password, user_in.role)
    _set_refresh_cookie(response, result.refresh_token)
    return _auth_response(result, "User registered successfully")


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: LoginRequest,
    response: Response,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    """
    Log in with email and password.

    Args:
        credentials: Email and password
        response: Response used to set the refresh cookie
        auth_service: Authentication service

    Returns:
        User projection and access token

    Raises:
        AuthenticationError: If the credentials are invalid
    """
    result = auth_service.login(credentials.email, credentials.password)
    _set_refresh_cookie(response, result.refresh_token)
    return _auth_response(result, "Login successful")


@router.post("/refresh-token", response_model=RefreshResponse)
def refresh(
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    refresh_token: Annotated[Optional[str], Cookie(alias=REFRESH_COOKIE_NAME)] = None,
) -> RefreshResponse:
    """
    Exchange the refresh-token cookie for a new access token.

    Raises:
        AuthenticationError: If the cookie is missing, revoked, expired or invalid
    """
    token = auth_service.refresh(refresh_token)
    return RefreshResponse(
        message="Access token refreshed successfully",
        data=TokenData(token=token),
    )


@router.post("/logout", response_model=StatusResponse)
def logout(
    response: Response,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    refresh_token: Annotated[Optional[str], Cookie(alias=REFRESH_COOKIE_NAME)] = None,
) -> StatusResponse:
    """Revoke the presented refresh token and clear the cookie."""
    auth_service.logout(refresh_token)
    response.delete_cookie(
        key=REFRESH_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    return StatusResponse(message="Logged out successfully")
