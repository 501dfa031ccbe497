"""
Token service: issues, resolves and revokes opaque bearer tokens.

A token is valid exactly while its record exists, has not expired and its
owner still exists. Multiple tokens per user are allowed (one per login or
registration); revoking one never touches the others.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlmodel import Session, select

from photoshare.core.config import settings
from photoshare.core.logging import get_logger
from photoshare.core.security import generate_token, hash_token
from photoshare.models.token import PersonalAccessToken
from photoshare.models.user import User

logger = get_logger(__name__)


class TokenService:
    """Service class for access token lifecycle operations."""

    @staticmethod
    def issue(session: Session, user: User, name: Optional[str] = None) -> str:
        """
        Create and persist a new token for a user.

        Args:
            session: Database session
            user: Owner of the token
            name: Optional label, defaults to settings.TOKEN_NAME

        Returns:
            The plaintext token. It is not recoverable afterwards.
        """
        plain = generate_token()
        now = datetime.now(timezone.utc)
        expires_at = None
        if settings.TOKEN_EXPIRE_MINUTES is not None:
            expires_at = now + timedelta(minutes=settings.TOKEN_EXPIRE_MINUTES)

        record = PersonalAccessToken(
            user_id=user.id,  # type: ignore[arg-type]
            name=name or settings.TOKEN_NAME,
            token_hash=hash_token(plain),
            created_at=now,
            expires_at=expires_at,
        )
        session.add(record)
        session.commit()
        session.refresh(record)
        logger.info(f"Issued token {record.id} for user {user.id}")
        return plain

    @staticmethod
    def find(session: Session, token: str) -> Optional[PersonalAccessToken]:
        """
        Look up the live record for a plaintext token.

        Malformed and unknown tokens take the same path: both are hashed and
        looked up by digest. Expired records and records whose owner no longer
        exists are removed and reported as missing.

        Args:
            session: Database session
            token: Plaintext bearer token

        Returns:
            The token record if valid, None otherwise
        """
        statement = select(PersonalAccessToken).where(
            PersonalAccessToken.token_hash == hash_token(token)
        )
        record = session.exec(statement).first()
        if record is None:
            return None

        if record.is_expired():
            logger.info(f"Token {record.id} expired, removing it")
            TokenService.revoke_record(session, record)
            return None

        if session.get(User, record.user_id) is None:
            logger.warning(f"Token {record.id} belongs to missing user {record.user_id}, removing it")
            TokenService.revoke_record(session, record)
            return None

        record.last_used_at = datetime.now(timezone.utc)
        session.add(record)
        session.commit()
        session.refresh(record)
        return record

    @staticmethod
    def resolve(session: Session, token: str) -> Optional[User]:
        """
        Resolve a plaintext token back to its owner.

        Returns:
            The owning user, or None when the token is invalid
        """
        record = TokenService.find(session, token)
        if record is None:
            return None
        return session.get(User, record.user_id)

    @staticmethod
    def revoke_record(session: Session, record: PersonalAccessToken) -> None:
        """Delete exactly this token record."""
        token_id = record.id
        session.delete(record)
        session.commit()
        logger.info(f"Revoked token {token_id}")

    @staticmethod
    def revoke(session: Session, token: str) -> bool:
        """
        Revoke a plaintext token. Unknown or already revoked tokens are not an error.

        Returns:
            True if a record was deleted
        """
        statement = select(PersonalAccessToken).where(
            PersonalAccessToken.token_hash == hash_token(token)
        )
        record = session.exec(statement).first()
        if record is None:
            return False
        TokenService.revoke_record(session, record)
        return True

    @staticmethod
    def revoke_all_for_user(session: Session, user_id: int, commit: bool = True) -> int:
        """
        Delete every token owned by a user.

        Args:
            session: Database session
            user_id: Owner whose tokens are deleted
            commit: Set False to leave the deletion in the caller's transaction

        Returns:
            Number of tokens deleted
        """
        statement = select(PersonalAccessToken).where(PersonalAccessToken.user_id == user_id)
        records = session.exec(statement).all()
        for record in records:
            session.delete(record)
        if commit:
            session.commit()
        else:
            session.flush()
        return len(records)

    @staticmethod
    def prune_expired(session: Session) -> int:
        """Delete all expired tokens. Returns the number deleted."""
        now = datetime.now(timezone.utc)
        statement = select(PersonalAccessToken).where(
            PersonalAccessToken.expires_at.is_not(None)  # type: ignore[union-attr]
        )
        expired = [record for record in session.exec(statement) if record.is_expired(now)]
        for record in expired:
            session.delete(record)
        session.commit()
        if expired:
            logger.info(f"Pruned {len(expired)} expired tokens")
        return len(expired)
