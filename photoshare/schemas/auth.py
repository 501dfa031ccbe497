"""
Token and message schemas returned by the authentication endpoints.
"""

from pydantic import BaseModel

from photoshare.schemas.user import UserResponse


class AuthResponse(BaseModel):
    """Issued bearer token together with the user it belongs to."""

    access_token: str
    token_type: str = "Bearer"
    user: UserResponse


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
