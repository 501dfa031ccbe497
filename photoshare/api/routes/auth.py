"""
Authentication routes: registration, login, logout and the current user.
Provides opaque bearer token authentication.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlmodel import Session

from photoshare.api.deps import get_current_access_token, get_current_user
from photoshare.core.exceptions import ValidationError
from photoshare.core.logging import get_logger
from photoshare.db.session import get_session
from photoshare.models.token import PersonalAccessToken
from photoshare.models.user import User
from photoshare.schemas.auth import AuthResponse, MessageResponse
from photoshare.schemas.user import UserCreate, UserLogin, UserResponse
from photoshare.services.token_service import TokenService
from photoshare.services.user_service import UserService

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials."


def _auth_response(session: Session, user: User) -> AuthResponse:
    access_token = TokenService.issue(session, user)
    return AuthResponse(access_token=access_token, user=UserResponse.model_validate(user))


@router.post("/register", response_model=AuthResponse)
def register(
    user_in: UserCreate,
    session: Annotated[Session, Depends(get_session)],
) -> AuthResponse:
    """
    Register a new client or photographer and sign them in.

    Args:
        user_in: User registration data
        session: Database session

    Returns:
        Access token and the created user

    Raises:
        ValidationError: If the email is already registered
    """
    try:
        user = UserService.create(session, user_create=user_in)
    except ValidationError:
        logger.warning(
            f"Registration attempt with existing email: {user_in.email}",
            extra={"event": "register_rejected"},
        )
        raise
    logger.info(
        f"New user registered: {user.email} (ID: {user.id}, role: {user.role.value})",
        extra={"event": "register", "user_id": user.id},
    )

    return _auth_response(session, user)


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: UserLogin,
    session: Annotated[Session, Depends(get_session)],
) -> AuthResponse:
    """
    Exchange email and password for a new access token.

    The same error is returned for an unknown email and a wrong password.

    Raises:
        ValidationError: If the credentials are invalid
    """
    user = UserService.authenticate(session, email=credentials.email, password=credentials.password)
    if not user:
        logger.warning(f"Failed login attempt for email: {credentials.email}", extra={"event": "login_failed"})
        raise ValidationError.for_field("email", INVALID_CREDENTIALS_MESSAGE)

    logger.info(f"User logged in: {user.email} (ID: {user.id})", extra={"event": "login", "user_id": user.id})
    return _auth_response(session, user)


@router.post("/logout", response_model=MessageResponse)
def logout(
    session: Annotated[Session, Depends(get_session)],
    token: Annotated[PersonalAccessToken, Depends(get_current_access_token)],
) -> MessageResponse:
    """Revoke the token used for this request. Other sessions stay signed in."""
    user_id = token.user_id
    token_id = token.id
    TokenService.revoke_record(session, token)
    logger.info(f"User {user_id} logged out (token {token_id})", extra={"event": "logout", "user_id": user_id})
    return MessageResponse(message="Logged out successfully")


@router.get("/user", response_model=UserResponse)
def get_current_user_profile(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    """Get the profile of the user behind the bearer token."""
    return UserResponse.model_validate(current_user)
