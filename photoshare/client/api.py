"""
HTTP transport for the client, built on httpx.

Every request carries ``Authorization: Bearer <token>`` when the storage holds
a token. Error responses are raised as the application's exception classes.
"""

from typing import Any, Optional

import httpx

from photoshare.client.storage import FileTokenStorage, TokenStorage
from photoshare.core.config import settings
from photoshare.core.exceptions import (
    AppError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from photoshare.core.logging import get_logger

logger = get_logger(__name__)

_ERRORS_BY_STATUS: dict[int, type[AppError]] = {
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
}


def error_from_response(response: httpx.Response) -> AppError:
    """Translate an error response into the matching AppError."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    message = body.get("detail") if isinstance(body.get("detail"), str) else None

    if response.status_code == 422:
        return ValidationError(message, errors=body.get("errors") or {})

    error_cls = _ERRORS_BY_STATUS.get(response.status_code)
    if error_cls is not None:
        return error_cls(message)

    error = AppError(message or f"Request failed with status {response.status_code}")
    error.status_code = response.status_code
    return error


class ApiClient:
    """Async JSON client for the photoshare API."""

    def __init__(
        self,
        base_url: str,
        storage: TokenStorage,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.storage = storage
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
            timeout=timeout,
            event_hooks={"request": [self._attach_token]},
        )

    @classmethod
    def from_settings(cls, storage: Optional[TokenStorage] = None) -> "ApiClient":
        if storage is None:
            storage = FileTokenStorage(settings.CLIENT_TOKEN_STORE_PATH, key=settings.CLIENT_TOKEN_KEY)
        return cls(settings.API_BASE_URL, storage, timeout=settings.CLIENT_TIMEOUT_SECONDS)

    async def _attach_token(self, request: httpx.Request) -> None:
        token = self.storage.get_token()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

    async def request(self, method: str, path: str, json: Any = None) -> Any:
        """
        Send a request and return the decoded JSON body.

        Raises:
            AppError: For any non-2xx response (the subclass matches the status)
            httpx.HTTPError: For transport failures
        """
        response = await self._http.request(method, path.lstrip("/"), json=json)
        if response.is_error:
            error = error_from_response(response)
            logger.debug(f"{method} {path} failed with {response.status_code}: {error.message}")
            raise error
        if not response.content:
            return None
        return response.json()

    async def get(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
