"""
Pydantic schemas for authentication.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from pydantic import Field

from straywatch.schemas.base import StrayWatchModel


class Identity(StrayWatchModel):
    """The authenticated user."""

    id: str
    email: str | None = None


class Session(StrayWatchModel):
    """Tokens issued by the auth service for one signed-in identity."""

    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_in: int | None = None
    expires_at: int | None = Field(
        default=None,
        description="Unix timestamp after which the access token is rejected",
    )
    user: Identity

    def is_expired(self, now: datetime | None = None, *, leeway: int = 10) -> bool:
        """Check expiry, treating tokens within ``leeway`` seconds of it as expired."""
        if self.expires_at is None:
            return False
        now = now or datetime.now(UTC)
        return now.timestamp() + leeway >= self.expires_at


class AuthEvent(str, Enum):
    """Session change events emitted by the backend client."""

    signed_in = "SIGNED_IN"
    signed_out = "SIGNED_OUT"
    token_refreshed = "TOKEN_REFRESHED"
    user_updated = "USER_UPDATED"


@dataclass(frozen=True)
class AuthChange:
    """
    A single session change notification.

    Attributes:
        event: What happened
        session: The new session, or None once signed out
    """

    event: AuthEvent
    session: Session | None

    @property
    def user(self) -> Identity | None:
        return self.session.user if self.session else None
