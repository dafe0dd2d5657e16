"""
User service layer implementing business logic for user operations.
Separates business logic from API routes and database operations.
"""

import secrets
import string
from typing import List, Optional

from sqlmodel import Session, select

from blog_api.models.user import User, UserRole
from blog_api.schemas.user import UserUpdate

USERNAME_PREFIX = "user-"
USERNAME_SUFFIX_LENGTH = 10
USERNAME_MAX_ATTEMPTS = 5
_USERNAME_ALPHABET = string.ascii_lowercase + string.digits


class UsernameUnavailableError(Exception):
    """No free username was found within the allowed attempts."""


def generate_username() -> str:
    """Random handle such as ``user-k3j9x0q2ma``."""
    suffix = "".join(secrets.choice(_USERNAME_ALPHABET) for _ in range(USERNAME_SUFFIX_LENGTH))
    return f"{USERNAME_PREFIX}{suffix}"


class UserService:
    """Service class for user-related operations."""

    @staticmethod
    def get_by_email(session: Session, email: str) -> Optional[User]:
        """
        Retrieve a user by email address.

        Args:
            session: Database session
            email: Email address to search for (case-insensitive)

        Returns:
            User if found, None otherwise
        """
        statement = select(User).where(User.email == email.strip().lower())
        return session.exec(statement).first()

    @staticmethod
    def get_by_username(session: Session, username: str) -> Optional[User]:
        statement = select(User).where(User.username == username)
        return session.exec(statement).first()

    @staticmethod
    def get_by_id(session: Session, user_id: int) -> Optional[User]:
        """
        Retrieve a user by ID.

        Args:
            session: Database session
            user_id: User ID to search for

        Returns:
            User if found, None otherwise
        """
        return session.get(User, user_id)

    @staticmethod
    def list_users(session: Session) -> List[User]:
        return list(session.exec(select(User).order_by(User.id)).all())

    @staticmethod
    def email_exists(session: Session, email: str) -> bool:
        return UserService.get_by_email(session, email) is not None

    @staticmethod
    def unique_username(session: Session) -> str:
        """
        Generate a username no existing user holds.

        The unique index still guards against a concurrent insert that picks
        the same name between this check and the commit.

        Raises:
            UsernameUnavailableError: If every attempt collided
        """
        for _ in range(USERNAME_MAX_ATTEMPTS):
            candidate = generate_username()
            if UserService.get_by_username(session, candidate) is None:
                return candidate
        raise UsernameUnavailableError("Could not generate a unique username")

    @staticmethod
    def create(
        session: Session,
        email: str,
        password: str,
        role: UserRole = UserRole.USER,
        commit: bool = True,
    ) -> User:
        """
        Create a new user. The password is hashed when the row is flushed.

        Args:
            session: Database session
            email: Email address
            password: Plain text password
            role: User role (defaults to USER)
            commit: Commit immediately, or only flush so the caller can add
                more rows to the same transaction

        Returns:
            Created user instance
        """
        db_user = User(
            username=UserService.unique_username(session),
            email=email,
            password=password,
            role=role,
        )
        session.add(db_user)
        if commit:
            session.commit()
            session.refresh(db_user)
        else:
            session.flush()
        return db_user

    @staticmethod
    def update_profile(session: Session, user: User, user_update: UserUpdate) -> User:
        """
        Apply profile changes. The password column is left untouched, so the
        stored hash is not re-hashed.

        Social links are merged into the stored ones; links not sent are kept.
        """
        changes = user_update.model_dump(exclude_unset=True)
        if user_update.social_links is not None:
            merged = dict(user.social_links or {})
            merged.update(user_update.social_links.model_dump(exclude_none=True))
            changes["social_links"] = merged
        else:
            changes.pop("social_links", None)
        for field, value in changes.items():
            setattr(user, field, value)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    @staticmethod
    def is_admin(user: User) -> bool:
        """
        Check if a user has admin privileges.

        Args:
            user: User to check

        Returns:
            True if user is admin, False otherwise
        """
        return user.role == UserRole.ADMIN
