"""
User model with role-based access control.
Every user holds exactly one of the client / photographer / admin roles.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class UserRole(str, Enum):
    """User role enumeration for RBAC. There is no hierarchy between roles."""

    CLIENT = "client"
    PHOTOGRAPHER = "photographer"
    ADMIN = "admin"


class User(SQLModel, table=True):
    """
    User model with authentication and role support.

    Attributes:
        id: Primary key
        name: Display name
        email: Unique email address (stored lower-cased, used for login)
        hashed_password: One-way salted password hash
        role: User role
        created_at: Timestamp of account creation
        updated_at: Timestamp of last update
    """

    __tablename__ = "users"  # type: ignore

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    email: str = Field(unique=True, index=True, max_length=255)
    hashed_password: str
    role: UserRole = Field(default=UserRole.CLIENT)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
