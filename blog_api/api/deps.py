"""
API dependencies for FastAPI dependency injection.
Provides reusable dependencies for authentication and authorization.
"""

from functools import lru_cache
from typing import Annotated, Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from blog_api.core.config import settings
from blog_api.core.errors import AuthenticationError, AuthorizationError
from blog_api.core.logging import get_logger
from blog_api.core.tokens import TokenConfig, TokenExpiredError, TokenInvalidError, TokenIssuer
from blog_api.db.session import get_session
from blog_api.models.user import User, UserRole
from blog_api.services.auth_service import AuthService
from blog_api.services.authorization import AdminAllowlistPolicy, RolePolicy
from blog_api.services.user_service import UserService

logger = get_logger(__name__)

# Bearer scheme for access tokens; errors are raised by get_current_user
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Token issuer built once from application settings."""
    return TokenIssuer(TokenConfig.from_settings(settings))


def get_role_policy() -> RolePolicy:
    """Registration role policy backed by the configured admin allowlist."""
    return AdminAllowlistPolicy(settings.ADMIN_EMAIL_ALLOWLIST)


def get_auth_service(
    session: Annotated[Session, Depends(get_session)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
    role_policy: Annotated[RolePolicy, Depends(get_role_policy)],
) -> AuthService:
    return AuthService(session=session, issuer=issuer, role_policy=role_policy)


def get_current_user(
    session: Annotated[Session, Depends(get_session)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> User:
    """
    Dependency to get the current authenticated user from an access token.

    Args:
        session: Database session
        issuer: Token issuer
        credentials: Bearer credentials from the Authorization header

    Returns:
        Current user

    Raises:
        AuthenticationError: If the token is missing, expired, invalid or
            its user no longer exists
    """
    if credentials is None:
        raise AuthenticationError("Access token is required")

    try:
        claims = issuer.verify_access(credentials.credentials)
    except TokenExpiredError:
        raise AuthenticationError("Access token has expired")
    except TokenInvalidError as e:
        logger.warning(f"Access token validation failed: {e}")
        raise AuthenticationError("Invalid access token")

    user = UserService.get_by_id(session, user_id=claims.user_id)
    if user is None:
        logger.warning(f"User {claims.user_id} not found")
        raise AuthenticationError("Invalid access token")

    return user


def require_role(*roles: UserRole) -> Callable[[User], User]:
    """
    Build a dependency that admits only users holding one of ``roles``.

    Args:
        roles: Roles allowed through

    Returns:
        Dependency returning the current user
    """

    def dependency(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        if current_user.role not in roles:
            logger.warning(f"User {current_user.id} with role {current_user.role.value} denied")
            raise AuthorizationError()
        return current_user

    return dependency


get_current_admin_user = require_role(UserRole.ADMIN)
