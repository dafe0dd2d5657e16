"""
Token schemas for the refresh and logout endpoints.
"""

from typing import Literal

from pydantic import BaseModel


class TokenData(BaseModel):
    """Payload of a successful refresh."""

    token: str


class StatusResponse(BaseModel):
    """Envelope for simple successful operations."""

    status: Literal["success"] = "success"
    code: Literal["Success"] = "Success"
    message: str


class RefreshResponse(StatusResponse):
    """Schema for a newly minted access token."""

    data: TokenData
