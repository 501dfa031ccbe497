"""
Authorization gate: decides whether an identity may perform a role-gated action.

Roles form no hierarchy. An admin does not satisfy a client requirement and
vice versa; each protected action names exactly one role, or none for
"any authenticated user".
"""

from enum import Enum
from typing import Optional, Union

from photoshare.core.exceptions import AuthenticationError, AuthorizationError
from photoshare.models.user import User, UserRole


class AccessDecision(str, Enum):
    """Outcome of an authorization check."""

    ALLOW = "allow"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


def authorize(
    identity: Optional[User],
    required_role: Optional[Union[UserRole, str]] = None,
) -> AccessDecision:
    """
    Decide access for a resolved identity.

    Args:
        identity: The user a token resolved to, or None when unauthenticated
        required_role: Role the action demands; None accepts any authenticated role

    Returns:
        The access decision

    Raises:
        ValueError: If either role is not a known UserRole
    """
    if identity is None:
        return AccessDecision.UNAUTHENTICATED
    if required_role is None:
        return AccessDecision.ALLOW

    required = UserRole(required_role)
    actual = UserRole(identity.role)
    if actual is required:
        return AccessDecision.ALLOW
    return AccessDecision.FORBIDDEN


def ensure_authorized(
    identity: Optional[User],
    required_role: Optional[Union[UserRole, str]] = None,
) -> User:
    """Like authorize(), but raises the matching error instead of returning a denial."""
    decision = authorize(identity, required_role)
    if decision is AccessDecision.UNAUTHENTICATED:
        raise AuthenticationError()
    if decision is AccessDecision.FORBIDDEN:
        role = UserRole(required_role).value  # type: ignore[arg-type]
        raise AuthorizationError(f"Unauthorized: {role.capitalize()} access only.")
    return identity  # type: ignore[return-value]
