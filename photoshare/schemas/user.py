"""
User schemas for API request/response validation.
Separates internal models from API contracts using Pydantic.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from photoshare.models.user import UserRole

EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 6


def normalize_email(value: str) -> str:
    """Emails compare case-insensitively; store and look them up lower-cased."""
    value = value.strip().lower()
    if len(value) > EMAIL_MAX_LENGTH:
        raise ValueError(f"The email may not be greater than {EMAIL_MAX_LENGTH} characters.")
    return value


class UserCreate(BaseModel):
    """Schema for user registration."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    role: UserRole = UserRole.CLIENT

    @field_validator("email", mode="after")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("role", mode="after")
    @classmethod
    def validate_role(cls, v: UserRole) -> UserRole:
        """Administrators are provisioned, never self-registered."""
        if v is UserRole.ADMIN:
            raise ValueError("The selected role is invalid.")
        return v


class UserLogin(BaseModel):
    """Schema for user login."""

    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email", mode="after")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)


class UserResponse(BaseModel):
    """
    Schema for user data in API responses.
    Excludes sensitive information like hashed_password.
    """

    id: int
    name: str
    email: str
    role: UserRole
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
