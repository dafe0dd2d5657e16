"""
Authentication service orchestrating registration, login, refresh and logout.

Every outcome is emitted as a structured log event. Token values and
passwords never appear in those events.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from blog_api.core.errors import AuthenticationError, AuthorizationError, ServerError
from blog_api.core.logging import get_logger, log_event
from blog_api.core.security import password_hasher
from blog_api.core.tokens import TokenExpiredError, TokenInvalidError, TokenIssuer
from blog_api.models.user import User, UserRole
from blog_api.services.authorization import RolePolicy
from blog_api.services.token_service import TokenService
from blog_api.services.user_service import UserService, UsernameUnavailableError

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Email or password is incorrect"
ADMIN_NOT_ALLOWED = "You are not allowed to register as an admin."
REFRESH_TOKEN_REQUIRED = "Refresh token is required"
REFRESH_TOKEN_UNKNOWN = "Invalid or expired refresh token"
REFRESH_TOKEN_EXPIRED = "Refresh token has expired"
REFRESH_TOKEN_INVALID = "Invalid refresh token"

# header.payload.signature, each base64url
_JWT_SHAPE = re.compile(r"^[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+$")


@dataclass(frozen=True)
class AuthResult:
    """A user together with the tokens of a freshly started session."""

    user: User
    access_token: str
    refresh_token: str


class AuthService:
    """Orchestrates the credential store, hasher, token issuer and ledger."""

    def __init__(self, session: Session, issuer: TokenIssuer, role_policy: RolePolicy) -> None:
        self.session = session
        self.issuer = issuer
        self.role_policy = role_policy

    def register(self, email: str, password: str, role: UserRole = UserRole.USER) -> AuthResult:
        """
        Create a user and start their first session.

        Args:
            email: Validated email address
            password: Validated plain text password
            role: Requested role

        Returns:
            The new user and their tokens

        Raises:
            AuthorizationError: If the policy refuses the requested role
            ServerError: If the user or ledger row could not be written
        """
        if not self.role_policy.is_authorized_for_role(email, role):
            log_event(
                logger,
                "auth.register.forbidden_role",
                logging.WARNING,
                email=email,
                role=role.value,
            )
            raise AuthorizationError(ADMIN_NOT_ALLOWED)

        try:
            user = UserService.create(self.session, email=email, password=password, role=role, commit=False)
            result = self._start_session(user)
        except (SQLAlchemyError, UsernameUnavailableError, ValueError) as e:
            self.session.rollback()
            log_event(
                logger,
                "auth.register.failed",
                logging.ERROR,
                email=email,
                error_type=type(e).__name__,
            )
            raise ServerError(error="Could not register user") from e

        log_event(
            logger,
            "auth.register.succeeded",
            user_id=user.id,
            username=user.username,
            role=user.role.value,
        )
        return result

    def login(self, email: str, password: str) -> AuthResult:
        """
        Verify credentials and start a new session.

        Both an unknown email and a wrong password fail with the same message.
        A stored hash on a deprecated scheme is replaced once the password
        has been verified.

        Raises:
            AuthenticationError: If the credentials do not match
            ServerError: If the ledger row could not be written
        """
        user = UserService.get_by_email(self.session, email)
        if user is None:
            password_hasher.dummy_verify()
            log_event(logger, "auth.login.failed", logging.WARNING, email=email, reason="unknown_email")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not password_hasher.verify(password, user.password):
            log_event(logger, "auth.login.failed", logging.WARNING, user_id=user.id, reason="bad_password")
            raise AuthenticationError(INVALID_CREDENTIALS)

        rehashed = password_hasher.needs_update(user.password)
        if rehashed:
            # Plain text again; the before_update hook hashes it with bcrypt
            user.password = password
            self.session.add(user)

        try:
            result = self._start_session(user)
        except SQLAlchemyError as e:
            self.session.rollback()
            log_event(logger, "auth.login.error", logging.ERROR, user_id=user.id, error_type=type(e).__name__)
            raise ServerError(error="Could not start session") from e

        log_event(
            logger,
            "auth.login.succeeded",
            user_id=user.id,
            role=user.role.value,
            password_rehashed=rehashed,
        )
        return result

    def refresh(self, refresh_token: Optional[str]) -> str:
        """
        Mint a new access token from a refresh token.

        The ledger is consulted before the signature so a revoked token is
        refused even while it still verifies. The refresh token is not rotated.

        Returns:
            A new access token

        Raises:
            AuthenticationError: If the token is missing, unknown, expired or invalid
            ServerError: If the ledger could not be read
        """
        if not refresh_token:
            raise AuthenticationError(REFRESH_TOKEN_REQUIRED)
        if not _JWT_SHAPE.match(refresh_token):
            log_event(logger, "auth.refresh.failed", logging.WARNING, reason="malformed")
            raise AuthenticationError(REFRESH_TOKEN_INVALID)

        try:
            known = TokenService.exists(self.session, refresh_token)
        except SQLAlchemyError as e:
            log_event(logger, "auth.refresh.error", logging.ERROR, error_type=type(e).__name__)
            raise ServerError(error="Could not read token ledger") from e

        if not known:
            log_event(logger, "auth.refresh.failed", logging.WARNING, reason="not_in_ledger")
            raise AuthenticationError(REFRESH_TOKEN_UNKNOWN)

        try:
            claims = self.issuer.verify_refresh(refresh_token)
        except TokenExpiredError:
            log_event(logger, "auth.refresh.failed", logging.INFO, reason="expired")
            raise AuthenticationError(REFRESH_TOKEN_EXPIRED)
        except TokenInvalidError:
            log_event(logger, "auth.refresh.failed", logging.WARNING, reason="invalid")
            raise AuthenticationError(REFRESH_TOKEN_INVALID)

        log_event(logger, "auth.refresh.succeeded", user_id=claims.user_id)
        return self.issuer.issue_access(claims.user_id)

    def logout(self, refresh_token: Optional[str]) -> bool:
        """
        End the session bound to ``refresh_token``.

        Other sessions of the same user are unaffected.

        Returns:
            True if a ledger row was removed
        """
        if not refresh_token:
            return False
        try:
            revoked = TokenService.revoke(self.session, refresh_token)
        except SQLAlchemyError as e:
            self.session.rollback()
            log_event(logger, "auth.logout.error", logging.ERROR, error_type=type(e).__name__)
            raise ServerError(error="Could not revoke refresh token") from e
        log_event(logger, "auth.logout.succeeded", revoked=revoked)
        return revoked

    def _start_session(self, user: User) -> AuthResult:
        """Issue both tokens, record the refresh token and commit."""
        assert user.id is not None
        access_token = self.issuer.issue_access(user.id)
        refresh_token = self.issuer.issue_refresh(user.id)
        TokenService.create(
            self.session,
            user_id=user.id,
            token=refresh_token,
            expires_at=datetime.now(timezone.utc) + self.issuer.config.refresh_ttl,
            commit=False,
        )
        self.session.commit()
        self.session.refresh(user)
        return AuthResult(user=user, access_token=access_token, refresh_token=refresh_token)
