"""Error types and exception handlers for the API.

Every domain failure is raised as an ``ApiError`` subclass where it is
detected and rendered at the outermost boundary as a JSON envelope of the
form ``{"code": <http status>, "message": <description>}``.
"""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

BearerErrorKind = Literal["invalid_request", "invalid_token", "insufficient_scope"]


class ConfigurationError(RuntimeError):
    """Raised at startup when the process cannot run with its configuration."""


class ApiError(Exception):
    """Base exception for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        headers: dict[str, str] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.headers = headers or {}
        self.cause = cause


class ValidationError(ApiError):
    """Malformed request body, query or path parameter."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(ApiError):
    """Missing or unusable bearer credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(
        self,
        kind: BearerErrorKind,
        message: str,
        *,
        realm: str = "",
        status_code: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.kind = kind
        challenge = (
            f'Bearer realm="{realm}",error="{kind}",error_description="{message}"'
        )
        super().__init__(
            message,
            status_code=status_code,
            headers={"WWW-Authenticate": challenge},
            cause=cause,
        )


class AuthorizationError(ApiError):
    """Authenticated, but not permitted to perform the action."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ApiError):
    """Referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ApiError):
    """Business rule violation such as deleting a referenced row."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConfigTypeMismatchError(ApiError):
    """A config setting was used as a type it is not declared as."""


class InternalError(ApiError):
    """Unexpected persistence or upstream failure."""

    def __init__(self, message: str = "Internal server error", *, cause: BaseException | None = None) -> None:
        super().__init__(message, cause=cause)


def error_body(code: int, message: str) -> dict[str, object]:
    return {"code": code, "message": message}


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Render an ``ApiError`` as the JSON envelope."""
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            "%s on %s: %s",
            type(exc).__name__,
            request.url.path,
            exc.message,
            exc_info=exc.cause,
        )
    elif exc.cause is not None:
        logger.info("%s on %s: %s (%s)", type(exc).__name__, request.url.path, exc.message, exc.cause)

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.message),
        headers=exc.headers or None,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Flatten pydantic validation errors into a readable 400 message."""
    issues = []
    for error in exc.errors():
        loc = error.get("loc", ())
        location = loc[0] if loc else "request"
        field = ".".join(str(part) for part in loc[1:]) or location
        issues.append(f"{error.get('msg', 'invalid value')} at \"{field}\"")

    location = "body"
    if exc.errors():
        first_loc = exc.errors()[0].get("loc", ())
        if first_loc and first_loc[0] in {"query", "path", "header"}:
            location = str(first_loc[0])

    message = f"Issue with request {location}: " + "; ".join(issues)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(status.HTTP_400_BAD_REQUEST, message),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, str(exc.detail) if exc.detail else f"HTTP {exc.status_code}"),
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install all handlers on the application."""
    app.add_exception_handler(ApiError, api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
