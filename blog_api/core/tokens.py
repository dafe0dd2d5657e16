"""
JWT issuance and verification for access and refresh tokens.

The two token kinds are signed with different secrets and carry different
``sub`` claims, so neither a leaked secret nor a swapped cookie lets one kind
stand in for the other.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from blog_api.core.config import Settings

ACCESS_TOKEN_SUBJECT = "accessApi"
REFRESH_TOKEN_SUBJECT = "refreshToken"


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenExpiredError(TokenError):
    """Token was well-formed and correctly signed but is past its expiry."""


class TokenInvalidError(TokenError):
    """Token failed signature, structure or subject checks."""


@dataclass(frozen=True)
class TokenConfig:
    """Signing material and lifetimes for the token issuer."""

    access_secret: str
    refresh_secret: str
    access_ttl: timedelta
    refresh_ttl: timedelta
    algorithm: str = "HS256"

    def __post_init__(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            raise ValueError("Token signing secrets must be non-empty")
        if self.access_secret == self.refresh_secret:
            raise ValueError("Access and refresh tokens must use distinct secrets")

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenConfig":
        return cls(
            access_secret=settings.JWT_ACCESS_SECRET,
            refresh_secret=settings.JWT_REFRESH_SECRET,
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            algorithm=settings.JWT_ALGORITHM,
        )


@dataclass(frozen=True)
class TokenClaims:
    """Verified claims of an access or refresh token."""

    user_id: int
    subject: str
    token_id: str
    issued_at: datetime
    expires_at: datetime


class TokenIssuer:
    """Stateless signer and verifier for both token kinds."""

    def __init__(self, config: TokenConfig) -> None:
        self.config = config

    def issue_access(self, user_id: int) -> str:
        """
        Create a signed access token.

        Args:
            user_id: Owning user's ID

        Returns:
            Encoded JWT string
        """
        return self._encode(
            user_id,
            ACCESS_TOKEN_SUBJECT,
            self.config.access_secret,
            self.config.access_ttl,
        )

    def issue_refresh(self, user_id: int) -> str:
        """
        Create a signed refresh token.

        Args:
            user_id: Owning user's ID

        Returns:
            Encoded JWT string
        """
        return self._encode(
            user_id,
            REFRESH_TOKEN_SUBJECT,
            self.config.refresh_secret,
            self.config.refresh_ttl,
        )

    def verify_access(self, token: str) -> TokenClaims:
        """
        Verify an access token.

        Raises:
            TokenExpiredError: If the token has expired
            TokenInvalidError: If the token is malformed, tampered or of the wrong kind
        """
        return self._decode(token, ACCESS_TOKEN_SUBJECT, self.config.access_secret)

    def verify_refresh(self, token: str) -> TokenClaims:
        """
        Verify a refresh token.

        Raises:
            TokenExpiredError: If the token has expired
            TokenInvalidError: If the token is malformed, tampered or of the wrong kind
        """
        return self._decode(token, REFRESH_TOKEN_SUBJECT, self.config.refresh_secret)

    def _encode(self, user_id: int, subject: str, secret: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        to_encode: dict[str, Any] = {
            "userId": str(user_id),
            "sub": subject,
            "iat": now,
            "exp": now + ttl,
            # Keeps tokens issued within the same second distinct
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(to_encode, secret, algorithm=self.config.algorithm)

    def _decode(self, token: str, subject: str, secret: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.config.algorithm],
                subject=subject,
                options={"require_exp": True, "require_sub": True},
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError(str(e)) from e
        except JWTError as e:
            raise TokenInvalidError(str(e)) from e

        try:
            return TokenClaims(
                user_id=int(payload["userId"]),
                subject=payload["sub"],
                token_id=str(payload.get("jti", "")),
                issued_at=datetime.fromtimestamp(payload.get("iat", 0), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise TokenInvalidError("Token payload is missing required claims") from e
