"""
Refresh-token ledger model.

A refresh token is only honoured while its exact string is present here,
which lets the server revoke it before it expires.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from blog_api.models.user import utcnow


class RefreshToken(SQLModel, table=True):
    """
    Issued refresh token bound to its owner.

    Attributes:
        id: Primary key
        user_id: Owning user
        token: Signed token string, stored verbatim
        expires_at: Expiry copied from the token, used for purging
        created_at: Timestamp of issuance
        updated_at: Timestamp of last update
    """

    __tablename__ = "refresh_tokens"  # type: ignore

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    token: str = Field(unique=True, index=True, max_length=500)
    expires_at: datetime = Field(index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column_kwargs={"onupdate": utcnow},
    )
