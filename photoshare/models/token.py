"""
Personal access token model.
Only the SHA-256 digest of a token is stored; the plaintext leaves the server once.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands datetimes back naive; they were written as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class PersonalAccessToken(SQLModel, table=True):
    """An issued bearer token belonging to exactly one user."""

    __tablename__ = "personal_access_tokens"  # type: ignore

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    name: str = Field(max_length=255)
    token_hash: str = Field(unique=True, index=True, max_length=64)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_used_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        expires_at = as_utc(self.expires_at)
        if expires_at is None:
            return False
        return expires_at <= (now or datetime.now(timezone.utc))
