"""
Session Models

A UserSession is the explicit context value threaded into every
owner-scoped operation. Nothing in the core reads a "current user" from
global state.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class UserSession(BaseModel):
    """An authenticated session bound to one user identity."""

    user_id: UUID = Field(
        ...,
        description="Owning-user identifier used to scope every row"
    )
    email: str
    access_token: str = Field(..., min_length=1)
    issued_at: datetime = Field(default_factory=datetime.utcnow)
    expires_at: Optional[datetime] = Field(
        default=None,
        description="None means the session does not expire"
    )

    @property
    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return datetime.utcnow() >= self.expires_at
