"""Client-side session handling and navigation guard for the photoshare API."""

from photoshare.client.api import ApiClient
from photoshare.client.router import DEFAULT_ROUTES, NavigationOutcome, Route, RouteGuard, Router, decide
from photoshare.client.session import AuthSession, SessionStatus
from photoshare.client.storage import FileTokenStorage, MemoryTokenStorage, TokenStorage

__all__ = [
    "DEFAULT_ROUTES",
    "ApiClient",
    "AuthSession",
    "FileTokenStorage",
    "MemoryTokenStorage",
    "NavigationOutcome",
    "Route",
    "RouteGuard",
    "Router",
    "SessionStatus",
    "TokenStorage",
    "decide",
]
