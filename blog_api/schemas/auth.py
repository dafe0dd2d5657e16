"""
Request and response schemas for the authentication endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field

from blog_api.models.user import UserRole
from blog_api.schemas.user import Email, Password, UserPublic


class RegisterRequest(BaseModel):
    """Schema for user registration."""

    email: Email
    password: Password
    role: UserRole = UserRole.USER


class LoginRequest(BaseModel):
    """Schema for user login."""

    email: Email
    password: Password


class AuthResponse(BaseModel):
    """User projection plus access token. The refresh token travels in a cookie."""

    model_config = ConfigDict(populate_by_name=True)

    user: UserPublic
    access_token: str = Field(alias="accessToken")
    message: str
