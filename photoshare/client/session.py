"""
Client-side session state.

``AuthSession`` mirrors the server's view of who is signed in: the bearer
token (persisted through a TokenStorage) and the user profile (kept in memory
and fetched again after a restart). It is a cache, never the authority; the
server re-checks every request.

States::

    LOGGED_OUT --login/register--> LOGGING_IN --ok--> LOGGED_IN
    cold start with stored token --> REHYDRATING --fetch ok--> LOGGED_IN
                                                 --401-------> LOGGED_OUT
    LOGGED_IN --logout--> LOGGED_OUT  (always, even if the server call fails)
"""

import asyncio
from enum import Enum
from typing import Any, Optional

import httpx

from photoshare.client.api import ApiClient
from photoshare.client.storage import TokenStorage
from photoshare.core.exceptions import AppError, AuthenticationError
from photoshare.core.logging import get_logger
from photoshare.models.user import UserRole
from photoshare.schemas.user import UserResponse

logger = get_logger(__name__)


class SessionStatus(str, Enum):
    LOGGED_OUT = "logged_out"
    LOGGING_IN = "logging_in"
    LOGGED_IN = "logged_in"
    REHYDRATING = "rehydrating"


def dashboard_for(role: UserRole) -> str:
    """Home page of a role."""
    return f"/{UserRole(role).value}/dashboard"


class AuthSession:
    """
    Token and profile of the signed-in user, plus the transitions between states.

    Every local state change bumps a generation counter. Responses that come
    back after the generation moved on (for example a profile fetch finishing
    after logout) are discarded instead of overwriting the newer state.
    """

    def __init__(self, api: ApiClient):
        self.api = api
        # Shared with the transport, which reads the bearer token from it
        self.storage: TokenStorage = api.storage
        self._token: Optional[str] = self.storage.get_token()
        self._user: Optional[UserResponse] = None
        self._pending = False
        self._generation = 0
        self._rehydration: Optional["asyncio.Future[Optional[UserResponse]]"] = None

    # ----- read-only views -----

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def user(self) -> Optional[UserResponse]:
        return self._user

    @property
    def role(self) -> Optional[UserRole]:
        return self._user.role if self._user else None

    @property
    def status(self) -> SessionStatus:
        if self._pending:
            return SessionStatus.LOGGING_IN
        if self._token and self._user:
            return SessionStatus.LOGGED_IN
        if self._token:
            return SessionStatus.REHYDRATING
        return SessionStatus.LOGGED_OUT

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.LOGGED_IN

    @property
    def dashboard_path(self) -> Optional[str]:
        role = self.role
        return dashboard_for(role) if role else None

    # ----- transitions -----

    def _set_auth(self, token: str, user: UserResponse) -> None:
        self._generation += 1
        self._token = token
        self._user = user
        self.storage.set_token(token)

    def _clear(self) -> None:
        self._generation += 1
        self._token = None
        self._user = None
        self._pending = False
        self.storage.clear()

    async def _authenticate(self, path: str, payload: dict[str, Any]) -> UserResponse:
        self._generation += 1
        generation = self._generation
        self._pending = True
        try:
            data = await self.api.post(path, json=payload)
        finally:
            if generation == self._generation:
                self._pending = False

        user = UserResponse.model_validate(data["user"])
        if generation != self._generation:
            logger.info(f"Discarding {path} response superseded by a newer session change")
            return user
        self._set_auth(data["access_token"], user)
        logger.info(f"Signed in as user {user.id} ({user.role.value})")
        return user

    async def login(self, email: str, password: str) -> UserResponse:
        """
        Sign in with email and password.

        Raises:
            ValidationError: If the credentials are rejected
        """
        return await self._authenticate("login", {"email": email, "password": password})

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        role: UserRole = UserRole.CLIENT,
    ) -> UserResponse:
        """
        Create an account and sign in with it.

        Raises:
            ValidationError: With field-level messages if the server rejects the data
        """
        payload = {"name": name, "email": email, "password": password, "role": UserRole(role).value}
        return await self._authenticate("register", payload)

    async def logout(self) -> None:
        """Revoke the token on the server if possible; the local session is cleared regardless."""
        try:
            if self._token:
                await self.api.post("logout")
        except (AppError, httpx.HTTPError) as e:
            logger.warning(f"Server-side logout failed, clearing local session anyway: {e}")
        finally:
            self._clear()

    async def fetch_user(self) -> Optional[UserResponse]:
        """
        Load the profile for the stored token.

        A 401 clears the session. Other failures propagate and keep the token,
        so a later navigation can try again.
        """
        if not self._token:
            return None
        generation = self._generation
        try:
            data = await self.api.get("user")
        except AuthenticationError:
            if generation == self._generation:
                logger.info("Stored token was rejected, clearing session")
                self._clear()
            return None

        if generation != self._generation:
            logger.debug("Discarding stale profile response")
            return self._user
        self._user = UserResponse.model_validate(data)
        return self._user

    async def rehydrate(self) -> SessionStatus:
        """
        Resolve a REHYDRATING session into LOGGED_IN or LOGGED_OUT.

        Concurrent callers share one profile fetch.
        """
        if self.status is not SessionStatus.REHYDRATING:
            return self.status
        if self._rehydration is None or self._rehydration.done():
            self._rehydration = asyncio.ensure_future(self.fetch_user())
        await asyncio.shield(self._rehydration)
        return self.status
