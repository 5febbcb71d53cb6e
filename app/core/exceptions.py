"""Custom exceptions and centralized exception handlers."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging import get_logger


logger = get_logger("error")


class AppException(Exception):
    """Base application exception with an ``{"error": message}`` body."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal error"

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
    ):
        self.message = message or self.message
        self.status_code = status_code or self.status_code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


class BadRequestError(AppException):
    """Missing or invalid request fields."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Bad request"


class AuthorizationError(AppException):
    """Credentials supplied but rejected (PIN mismatch)."""

    status_code = status.HTTP_403_FORBIDDEN
    message = "Forbidden"


class NotFoundError(AppException):
    """Resource not found."""

    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class UpstreamError(AppException):
    """External service failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    message = "Upstream service failed"


class StatsApiError(UpstreamError):
    """Fortnite stats API returned an error or could not be reached."""

    message = "Failed to fetch stats"


class StatsNotFoundError(StatsApiError):
    """Fortnite stats API does not know the player."""


class StatsRateLimitedError(StatsApiError):
    """Fortnite stats API answered 429."""


class TradeError(AppException):
    """Trade rejected by the executor (insufficient cash, unknown coin, ...)."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Trade failed"


def error_response(
    message: str, status_code: int, headers: dict[str, str] | None = None
) -> JSONResponse:
    """Build the uniform ``{"error": message}`` response."""
    return JSONResponse(
        status_code=status_code, content={"error": message}, headers=headers
    )


def _request_id_header(request: Request) -> dict[str, str]:
    return {"X-Request-ID": getattr(request.state, "request_id", "unknown")}


def register_exception_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers."""

    @app.exception_handler(AppException)
    async def app_exception_handler(
        request: Request, exc: AppException
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
            headers=_request_id_header(request),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{field}: {first.get('msg', 'invalid')}" if field else first.get("msg", "invalid")
        else:
            message = "Invalid request"
        return error_response(message, status.HTTP_400_BAD_REQUEST, _request_id_header(request))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        # Routing is by exact (path, method) pair, so a wrong method is a miss too.
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return error_response("Not found", status.HTTP_404_NOT_FOUND, _request_id_header(request))
        return error_response(str(exc.detail), exc.status_code, _request_id_header(request))
