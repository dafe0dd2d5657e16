"""
User schemas for API request/response validation.
Separates internal models from API contracts using Pydantic.
"""

from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, EmailStr, Field
from pydantic_core import PydanticCustomError

from blog_api.core.security import BCRYPT_MAX_PASSWORD_BYTES
from blog_api.models.user import UserRole

EMAIL_MIN_LENGTH = 5
EMAIL_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 8


def _normalize_email(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _check_email_length(value: str) -> str:
    if len(value) < EMAIL_MIN_LENGTH:
        raise PydanticCustomError(
            "email_too_short", "Email must be at least 5 characters long"
        )
    if len(value) > EMAIL_MAX_LENGTH:
        raise PydanticCustomError(
            "email_too_long", "Email must be at most 50 characters long"
        )
    return value


def _check_password(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH:
        raise PydanticCustomError(
            "password_too_short", "Password must be at least 8 characters long"
        )
    if len(value.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        raise PydanticCustomError(
            "password_too_long", "Password must be at most 72 bytes long"
        )
    return value


Email = Annotated[
    EmailStr,
    BeforeValidator(_normalize_email),
    AfterValidator(_check_email_length),
]
Password = Annotated[str, AfterValidator(_check_password)]


class SocialLinks(BaseModel):
    """Optional links to the user's profiles elsewhere."""

    model_config = ConfigDict(str_strip_whitespace=True)

    facebook: Optional[str] = Field(default=None, max_length=100)
    instagram: Optional[str] = Field(default=None, max_length=100)
    website: Optional[str] = Field(default=None, max_length=100)
    x: Optional[str] = Field(default=None, max_length=100)
    youtube: Optional[str] = Field(default=None, max_length=100)
    linkedin: Optional[str] = Field(default=None, max_length=100)


class UserPublic(BaseModel):
    """Projection returned alongside tokens. Never carries the password."""

    username: str
    email: str
    role: UserRole

    model_config = {"from_attributes": True}


class UserResponse(UserPublic):
    """Full profile of a user in API responses."""

    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    social_links: Optional[SocialLinks] = None
    created_at: datetime
    updated_at: datetime


class UserUpdate(BaseModel):
    """Profile fields a user may change about themselves."""

    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: Optional[str] = Field(default=None, max_length=30)
    last_name: Optional[str] = Field(default=None, max_length=30)
    social_links: Optional[SocialLinks] = None
