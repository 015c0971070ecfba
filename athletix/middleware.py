"""
Middleware and Error Handlers
=============================

Request logging plus the exception handlers that turn every failure into a
``{"message", "details"}`` JSON body.

Usage:
    from athletix.middleware import setup_middleware, setup_exception_handlers
    setup_middleware(app, settings)
    setup_exception_handlers(app)
"""

import logging
import time
import uuid
from typing import Any, Callable

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from athletix.auth import AuthError
from athletix.config import Settings
from athletix.errors import AthletixError, is_unique_violation

logger = logging.getLogger(__name__)


# =============================================================================
# REQUEST LOGGING
# =============================================================================

# Probes and API docs are polled constantly and carry no user data
QUIET_PATHS = {"/health", "/ready", "/live", "/favicon.ico"}
QUIET_PREFIXES = ("/docs", "/redoc", "/openapi.json")

# Recovery links and some frontends put credentials in the query string
SENSITIVE_PARAMS = {"token", "access_token", "refresh_token", "password", "code"}

REQUEST_ID_HEADER = "X-Request-ID"


def redact_query(request: Request) -> str:
    """Query string with credential values masked."""
    return "&".join(
        f"{key}=***" if key.lower() in SENSITIVE_PARAMS else f"{key}={value}"
        for key, value in request.query_params.multi_items()
    )


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For when behind the frontend proxy."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One log line per API request: method, path, redacted query, status,
    duration, client and request id.

    A request id sent by the frontend is reused so both sides can be
    correlated; otherwise a short one is generated. Either way it is echoed
    back in ``X-Request-ID``.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if path in QUIET_PATHS or path.startswith(QUIET_PREFIXES):
            return await call_next(request)

        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        start_time = time.perf_counter()

        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            if status_code >= 500:
                level = logging.ERROR
            elif status_code >= 400:
                level = logging.WARNING
            else:
                level = logging.INFO
            logger.log(
                level,
                "%s %s%s -> %d in %.1fms [%s] from %s",
                request.method,
                path,
                f"?{redact_query(request)}" if request.query_params else "",
                status_code,
                (time.perf_counter() - start_time) * 1000,
                request_id,
                client_ip(request),
            )


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

def error_response(status_code: int, message: str, details: Any = None, headers=None) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=status_code,
        content={"message": message, "details": details},
        headers=headers,
    )


def _describe_validation_errors(errors: list) -> str:
    missing = [
        ".".join(str(p) for p in err["loc"][1:]) for err in errors if err.get("type") == "missing"
    ]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:])
    if field:
        return f"Invalid value for {field}: {first.get('msg', 'invalid')}"
    # Model-level validators report against the whole body
    return first.get("msg", "Invalid request")


async def athletix_error_handler(request: Request, exc: AthletixError) -> ORJSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message, exc.details, exc.headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> ORJSONResponse:
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    errors = exc.errors()
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        _describe_validation_errors(errors),
        [{"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]} for e in errors],
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> ORJSONResponse:
    """Unique violations are conflicts; foreign key, NOT NULL and CHECK failures are not."""
    if not is_unique_violation(exc):
        return await database_error_handler(request, exc)
    logger.warning("Unique violation on %s %s: %s", request.method, request.url.path, exc.orig)
    return error_response(status.HTTP_409_CONFLICT, "Conflicts with existing data", str(exc.orig))


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> ORJSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    details = str(exc.orig) if getattr(exc, "orig", None) is not None else str(exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error", details)


async def auth_error_handler(request: Request, exc: AuthError) -> ORJSONResponse:
    if 400 <= exc.status_code < 500:
        return error_response(exc.status_code, exc.message)
    logger.error("Auth service error on %s %s: %s", request.method, request.url.path, exc.message)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Auth service error", exc.message)


async def unhandled_error_handler(request: Request, exc: Exception) -> ORJSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", str(exc))


def setup_exception_handlers(app: FastAPI) -> None:
    # Most specific first; Starlette resolves handlers along the exception MRO
    app.add_exception_handler(AthletixError, athletix_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


# =============================================================================
# SETUP FUNCTION
# =============================================================================

def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure CORS and request logging."""
    cors_origins = settings.cors_origins_list

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
    )

    # Outermost - logs everything
    app.add_middleware(RequestLoggingMiddleware)

    logger.info(f"Middleware configured: cors_origins={len(cors_origins)} origins")
