"""
Refresh-token ledger operations.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Session, func, select

from blog_api.core.logging import get_logger
from blog_api.models.token import RefreshToken

logger = get_logger(__name__)


class TokenService:
    """Service class for the refresh-token ledger."""

    @staticmethod
    def create(
        session: Session,
        user_id: int,
        token: str,
        expires_at: datetime,
        commit: bool = True,
    ) -> RefreshToken:
        """
        Record an issued refresh token.

        Args:
            session: Database session
            user_id: Owning user
            token: Signed token string
            expires_at: When the token stops verifying
            commit: Commit immediately, or leave it to the caller

        Returns:
            Created ledger row
        """
        record = RefreshToken(user_id=user_id, token=token, expires_at=expires_at)
        session.add(record)
        if commit:
            session.commit()
            session.refresh(record)
        else:
            session.flush()
        return record

    @staticmethod
    def get(session: Session, token: str) -> Optional[RefreshToken]:
        statement = select(RefreshToken).where(RefreshToken.token == token)
        return session.exec(statement).first()

    @staticmethod
    def exists(session: Session, token: str) -> bool:
        """Exact-match lookup; signature is not checked here."""
        return TokenService.get(session, token) is not None

    @staticmethod
    def count_for_user(session: Session, user_id: int) -> int:
        statement = select(func.count()).select_from(RefreshToken).where(RefreshToken.user_id == user_id)
        return session.exec(statement).one()

    @staticmethod
    def revoke(session: Session, token: str) -> bool:
        """
        Remove a refresh token from the ledger.

        Returns:
            True if a row was deleted, False if the token was unknown
        """
        record = TokenService.get(session, token)
        if record is None:
            return False
        session.delete(record)
        session.commit()
        return True

    @staticmethod
    def purge_expired(session: Session, now: Optional[datetime] = None) -> int:
        """
        Delete ledger rows whose token has expired.

        Expired tokens already fail verification, so this only reclaims space.

        Returns:
            Number of rows deleted
        """
        cutoff = now or datetime.now(timezone.utc)
        statement = select(RefreshToken).where(RefreshToken.expires_at < cutoff)
        expired = session.exec(statement).all()
        for record in expired:
            session.delete(record)
        session.commit()
        purged = len(expired)
        if purged:
            logger.info(f"Purged {purged} expired refresh tokens")
        return purged
