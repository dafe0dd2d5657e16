"""Pydantic schemas for request/response validation."""

from blog_api.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from blog_api.schemas.token import RefreshResponse, StatusResponse, TokenData
from blog_api.schemas.user import SocialLinks, UserPublic, UserResponse, UserUpdate

__all__ = [
    "AuthResponse",
    "LoginRequest",
    "RefreshResponse",
    "RegisterRequest",
    "SocialLinks",
    "StatusResponse",
    "TokenData",
    "UserPublic",
    "UserResponse",
    "UserUpdate",
]
