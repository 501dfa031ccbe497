"""
Client-side routing with a role-aware navigation guard.

The guard only decides what the user gets to see; it is not a security
boundary. The API enforces roles on every request regardless of what the
client believes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

import httpx

from photoshare.client.session import AuthSession, SessionStatus, dashboard_for
from photoshare.core.exceptions import AppError, NotFoundError
from photoshare.core.logging import get_logger
from photoshare.models.user import UserRole

logger = get_logger(__name__)

LOGIN_PATH = "/login"
REGISTER_PATH = "/register"
GUEST_ONLY_PATHS = frozenset({LOGIN_PATH, REGISTER_PATH})


@dataclass(frozen=True)
class Route:
    """
    A client route.

    Attributes:
        path: Exact path this route answers to
        requires_auth: Only signed-in users may open it
        role: Only users with exactly this role may open it (implies requires_auth)
        redirect: Static redirect applied before any guard check
        role_home: Sends signed-in users on to their own role dashboard
    """

    path: str
    requires_auth: bool = False
    role: Optional[UserRole] = None
    redirect: Optional[str] = None
    role_home: bool = False

    @property
    def needs_login(self) -> bool:
        return self.requires_auth or self.role is not None


DEFAULT_ROUTES = (
    Route("/", redirect=LOGIN_PATH),
    Route(LOGIN_PATH),
    Route(REGISTER_PATH),
    Route("/dashboard", requires_auth=True, role_home=True),
    Route("/client/dashboard", role=UserRole.CLIENT),
    Route("/photographer/dashboard", role=UserRole.PHOTOGRAPHER),
    Route("/admin/dashboard", role=UserRole.ADMIN),
    Route("/admin/users", role=UserRole.ADMIN),
    Route("/admin/categories", role=UserRole.ADMIN),
)


@dataclass(frozen=True)
class GuardDecision:
    redirect: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.redirect is None


ALLOW = GuardDecision()


def decide(route: Route, status: SessionStatus, role: Optional[UserRole]) -> GuardDecision:
    """
    Pure navigation decision for a settled session.

    Any status other than LOGGED_IN counts as signed out here; a REHYDRATING
    session must be resolved by the caller first.
    """
    logged_in = status is SessionStatus.LOGGED_IN and role is not None

    if route.needs_login and not logged_in:
        return GuardDecision(redirect=LOGIN_PATH)

    if not logged_in:
        return ALLOW

    home = dashboard_for(role)  # type: ignore[arg-type]
    if route.path in GUEST_ONLY_PATHS:
        return GuardDecision(redirect=home)
    if route.role_home:
        return GuardDecision(redirect=home)
    if route.role is not None and route.role != role:
        return GuardDecision(redirect=home)
    return ALLOW


class RouteGuard:
    """Runs before every navigation, settling the session before deciding."""

    def __init__(self, session: AuthSession):
        self.session = session

    async def check(self, route: Route, settle: bool = True) -> GuardDecision:
        """
        Decide access to ``route``.

        Args:
            route: Target route
            settle: Resolve a REHYDRATING session first. Pass False to decide on
                the current state without another profile fetch.
        """
        if settle and self.session.status is SessionStatus.REHYDRATING:
            try:
                await self.session.rehydrate()
            except (AppError, httpx.HTTPError) as e:
                # Token is kept; the next navigation retries the fetch
                logger.warning(f"Could not restore session before navigating to {route.path}: {e}")
        return decide(route, self.session.status, self.session.role)


class NavigationOutcome(str, Enum):
    COMPLETED = "completed"
    SUPERSEDED = "superseded"


@dataclass
class NavigationResult:
    outcome: NavigationOutcome
    path: str
    redirects: List[str] = field(default_factory=list)


class Router:
    """
    Resolves paths, applies the guard and tracks the current location.

    Navigations are last-one-wins: if a newer navigation starts while an older
    one is still waiting on the guard, the older one ends as SUPERSEDED and
    leaves ``current_path`` alone.
    """

    MAX_REDIRECTS = 5

    def __init__(self, session: AuthSession, routes: Iterable[Route] = DEFAULT_ROUTES):
        self.session = session
        self.guard = RouteGuard(session)
        self._routes = {route.path: route for route in routes}
        self.current_path: Optional[str] = None
        self._navigation_id = 0

    def resolve(self, path: str) -> Route:
        normalized = "/" + path.strip().strip("/") if path.strip("/") else "/"
        route = self._routes.get(normalized)
        if route is None:
            raise NotFoundError(f"No route for {path}")
        return route

    async def navigate(self, path: str) -> NavigationResult:
        self._navigation_id += 1
        navigation_id = self._navigation_id
        redirects: List[str] = []
        target = path
        settled = False

        for _ in range(self.MAX_REDIRECTS + 1):
            route = self.resolve(target)
            if route.redirect is not None:
                target = route.redirect
                redirects.append(target)
                continue

            # The profile is fetched at most once per navigation
            decision = await self.guard.check(route, settle=not settled)
            settled = True
            if navigation_id != self._navigation_id:
                logger.debug(f"Navigation to {path} superseded")
                return NavigationResult(NavigationOutcome.SUPERSEDED, route.path, redirects)

            if decision.allowed:
                self.current_path = route.path
                return NavigationResult(NavigationOutcome.COMPLETED, route.path, redirects)

            target = decision.redirect  # type: ignore[assignment]
            redirects.append(target)

        raise RuntimeError(f"Too many redirects while navigating to {path}: {redirects}")
