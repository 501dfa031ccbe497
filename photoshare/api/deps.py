"""
API dependencies for FastAPI dependency injection.
Provides reusable dependencies for authentication and authorization.
"""

from typing import Annotated, Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from photoshare.core.authorization import ensure_authorized
from photoshare.core.exceptions import AuthenticationError
from photoshare.core.logging import get_logger
from photoshare.db.session import get_session
from photoshare.models.token import PersonalAccessToken
from photoshare.models.user import User, UserRole
from photoshare.services.token_service import TokenService
from photoshare.services.user_service import UserService

logger = get_logger(__name__)

# auto_error=False so a missing header goes through our own 401 response
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_access_token(
    session: Annotated[Session, Depends(get_session)],
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> PersonalAccessToken:
    """
    Dependency to resolve the bearer token presented with the request.

    Raises:
        AuthenticationError: If no token was sent or it is not valid
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    record = TokenService.find(session, credentials.credentials)
    if record is None:
        logger.warning("Rejected request with an invalid bearer token")
        raise AuthenticationError()
    return record


def get_current_user(
    session: Annotated[Session, Depends(get_session)],
    token: Annotated[PersonalAccessToken, Depends(get_current_access_token)],
) -> User:
    """
    Dependency to get the user behind the current bearer token.

    Raises:
        AuthenticationError: If the owner disappeared since the token was checked
    """
    user = UserService.get_by_id(session, token.user_id)
    return ensure_authorized(user)


def require_role(role: UserRole) -> Callable[..., User]:
    """
    Build a dependency that admits only users holding exactly ``role``.

    Args:
        role: The single role the route demands

    Returns:
        Dependency returning the authorized user
    """

    def dependency(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        if current_user.role != role:
            logger.warning(f"User {current_user.id} ({current_user.role.value}) denied {role.value}-only access")
        return ensure_authorized(current_user, role)

    dependency.__name__ = f"require_{role.value}"
    return dependency


get_current_admin_user = require_role(UserRole.ADMIN)
