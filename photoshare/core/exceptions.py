"""
Application error taxonomy and the FastAPI handlers that render it.

Every failure a caller can act on is an ``AppError`` subclass carrying its
HTTP status. The client package raises the same classes when it reads the
corresponding responses back.
"""

from collections import defaultdict
from typing import Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from photoshare.core.logging import get_logger

logger = get_logger(__name__)

INVALID_DATA_MESSAGE = "The given data was invalid."


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return None

    def to_dict(self) -> dict:
        return {"detail": self.message}


class ValidationError(AppError):
    """Field-level input problems (422)."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = INVALID_DATA_MESSAGE

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[Dict[str, List[str]]] = None,
    ) -> None:
        super().__init__(message)
        self.errors: Dict[str, List[str]] = errors or {}

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors={field: [message]})

    def to_dict(self) -> dict:
        return {"detail": self.message, "errors": self.errors}


class AuthenticationError(AppError):
    """No bearer token, or one that does not resolve to a user (401)."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthenticated."

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class AuthorizationError(AppError):
    """Authenticated, but the role does not permit the action (403)."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "This action is unauthorized."


class NotFoundError(AppError):
    """Requested record does not exist (404)."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


def _field_name(loc: tuple) -> str:
    # ("body", "email") -> "email"; nested locations keep their dotted path
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or "request"


def format_request_errors(exc: RequestValidationError) -> Dict[str, List[str]]:
    """Collapse pydantic error entries into ``{field: [messages]}``."""
    errors: Dict[str, List[str]] = defaultdict(list)
    for error in exc.errors():
        message = error.get("msg", "Invalid value")
        # pydantic prefixes custom ValueError messages
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors[_field_name(tuple(error.get("loc", ())))].append(message)
    return dict(errors)


async def _app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


async def _request_validation_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": INVALID_DATA_MESSAGE, "errors": format_request_errors(exc)},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(AppError, _app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
