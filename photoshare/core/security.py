"""
Security utilities for password hashing and opaque access token handling.

Passwords are hashed with ``pbkdf2_sha256`` through passlib. Access tokens are
random URL-safe strings; only their SHA-256 digest is ever persisted.
"""

import hashlib
import secrets

from passlib.context import CryptContext

from photoshare.core.config import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password
        hashed_password: The hashed password to compare against

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a password using the configured default scheme.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    return pwd_context.hash(password)


def dummy_verify() -> None:
    """Spend the same hashing work as a real verification (unknown-email logins)."""
    pwd_context.dummy_verify()


def generate_token() -> str:
    """Create a new plaintext bearer token."""
    return secrets.token_urlsafe(settings.TOKEN_ENTROPY_BYTES)


def hash_token(token: str) -> str:
    """Digest stored in place of the plaintext token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
