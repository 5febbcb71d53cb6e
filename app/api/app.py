"""API application factory."""

from __future__ import annotations

import re
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings
from app.core.exceptions import error_response, register_exception_handlers
from app.core.logging import get_logger, log_fields, request_id_var
from app.schemas.common import ErrorResponse

from .routes import fortnite, health, market, rooms, trade


logger = get_logger("api")

LOCAL_ORIGIN_PATTERNS = (
    re.compile(r"^http://localhost(:\d+)?$"),
    re.compile(r"^http://127\.0\.0\.1(:\d+)?$"),
    re.compile(r"^https://"),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - initialize and cleanup resources."""
    from app.database.connection import close_sqlalchemy_engine, init_sqlalchemy_engine

    try:
        await init_sqlalchemy_engine()
    except Exception as e:
        logger.warning(f"Database engine initialization failed (may be ok in tests): {e}")

    yield

    try:
        await close_sqlalchemy_engine()
    except Exception as e:
        logger.warning(f"Resource cleanup failed: {e}")


def allowed_origin(origin: str | None) -> str:
    """Echo local and https origins, ``*`` for everything else."""
    if origin and any(pattern.match(origin) for pattern in LOCAL_ORIGIN_PATTERNS):
        return origin
    return "*"


def cors_headers(origin: str | None) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": allowed_origin(origin),
        "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
        "Access-Control-Allow-Headers": "content-type,authorization",
        "Access-Control-Max-Age": "86400",
        "Vary": "Origin",
    }


class EdgeCORSMiddleware(BaseHTTPMiddleware):
    """Answer preflights and stamp CORS headers on every response.

    Also the last line of defence: anything the exception handlers did not
    map becomes a 500 error envelope, so browsers still see CORS headers.
    """

    async def dispatch(self, request: Request, call_next):
        headers = cors_headers(request.headers.get("origin"))

        if request.method == "OPTIONS":
            return PlainTextResponse("ok", headers=headers)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(f"Unhandled error on {request.method} {request.url.path}")
            response = error_response(str(e) or "Internal error", 500)

        response.headers.update(headers)
        return response


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add request ID to all requests for tracing."""

    async def dispatch(self, request: Request, call_next):
        import uuid

        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        request_id_var.set(request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration. Query strings are never logged."""

    async def dispatch(self, request: Request, call_next):
        import time

        start_time = time.monotonic()

        response = await call_next(request)

        duration = time.monotonic() - start_time
        path = request.url.path

        logger.info(
            f"{request.method} {path} -> {response.status_code} ({duration:.3f}s)",
            extra=log_fields(
                method=request.method,
                path=path,
                status_code=response.status_code,
                duration_ms=int(duration * 1000),
            ),
        )

        return response


def create_api_app() -> FastAPI:
    """Create and configure the API application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Multiplayer stat-coin market backed by Fortnite player stats",
        root_path=settings.root_path,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        responses={
            400: {"model": ErrorResponse, "description": "Bad Request"},
            403: {"model": ErrorResponse, "description": "Forbidden"},
            404: {"model": ErrorResponse, "description": "Not Found"},
            500: {"model": ErrorResponse, "description": "Internal Server Error"},
            502: {"model": ErrorResponse, "description": "Upstream Error"},
        },
    )

    # Last added is outermost
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(EdgeCORSMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(fortnite.router, prefix="/api/fortnite", tags=["Fortnite"])
    app.include_router(rooms.router, prefix="/api/room", tags=["Rooms"])
    app.include_router(market.router, prefix="/api/market", tags=["Market"])
    app.include_router(trade.router, prefix="/api/trade", tags=["Trade"])

    return app
