"""
User model with role-based access control.

Passwords are assigned in plain text and hashed by the mapper hooks at the
bottom of this module right before the row is written.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, event
from sqlalchemy.orm import Mapper, attributes
from sqlmodel import Field, SQLModel

from blog_api.core.security import password_hasher


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, Enum):
    """User role enumeration for RBAC."""

    ADMIN = "admin"
    USER = "user"


class User(SQLModel, table=True):
    """
    User model with authentication and role support.

    Attributes:
        id: Primary key
        username: Unique generated handle (3-20 chars)
        email: Unique, lowercased email address (used for login)
        password: Password hash once flushed; never serialized
        role: User role (admin or user)
        first_name: Optional first name
        last_name: Optional last name
        social_links: Optional mapping of network name to profile URL
        created_at: Timestamp of account creation
        updated_at: Timestamp of last update
    """

    __tablename__ = "users"  # type: ignore

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True, min_length=3, max_length=20)
    email: str = Field(unique=True, index=True, max_length=50)
    password: str = Field(max_length=255)
    role: UserRole = Field(default=UserRole.USER)
    first_name: Optional[str] = Field(default=None, max_length=30)
    last_name: Optional[str] = Field(default=None, max_length=30)
    social_links: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column_kwargs={"onupdate": utcnow},
    )


@event.listens_for(User, "before_insert")
def _hash_password_on_insert(mapper: Mapper, connection: Any, target: User) -> None:
    target.email = target.email.strip().lower()
    target.password = password_hasher.hash(target.password)


@event.listens_for(User, "before_update")
def _hash_password_on_update(mapper: Mapper, connection: Any, target: User) -> None:
    if attributes.get_history(target, "email").has_changes():
        target.email = target.email.strip().lower()
    # Only a freshly assigned password is plain text
    if attributes.get_history(target, "password").has_changes():
        target.password = password_hasher.hash(target.password)
