"""Pydantic schemas for request/response validation."""

from photoshare.schemas.auth import AuthResponse, MessageResponse
from photoshare.schemas.category import CategoryCreate, CategoryResponse
from photoshare.schemas.user import UserCreate, UserLogin, UserResponse

__all__ = [
    "AuthResponse",
    "CategoryCreate",
    "CategoryResponse",
    "MessageResponse",
    "UserCreate",
    "UserLogin",
    "UserResponse",
]
