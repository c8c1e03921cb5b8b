"""
Error handling middleware with security-compliant error sanitization.

Maps every failure to the uniform error envelope:

    {"success": false, "error": <code>, "message": ..., "timestamp": ..., "details"?: [...]}

Application errors carry their own status and code; framework validation
errors and database errors are translated into the same taxonomy so raw
driver messages never reach the client.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, NoResultFound, OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.errors import (
    AppError,
    BadRequestError,
    ConflictError,
    NotFoundError,
    SchemaValidationError,
    ServiceUnavailableError,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"

# Patterns for sensitive data that should never be returned or logged
SENSITIVE_PATTERNS = [
    re.compile(r'password["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'token["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'api[_-]?key["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'secret["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'authorization["\s:]+[^"\s,}]+', re.IGNORECASE),
]

UNIQUE_VIOLATION_CODES = {"23505"}
FOREIGN_KEY_VIOLATION_CODES = {"23503"}


def sanitize_error_message(message: str) -> str:
    """
    Remove sensitive information from error messages.

    Args:
        message: Original error message

    Returns:
        Sanitized error message
    """
    sanitized = message
    for pattern in SENSITIVE_PATTERNS:
        sanitized = pattern.sub('[REDACTED]', sanitized)
    return sanitized


def error_envelope(
    code: str,
    message: str,
    details: Optional[list[dict[str, Any]]] = None,
    request_id: Optional[str] = None,
) -> dict[str, Any]:
    """Build the JSON body shared by every error response."""
    body: dict[str, Any] = {
        "success": False,
        "error": code,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details is not None:
        body["details"] = details
    if request_id:
        body["request_id"] = request_id
    return body


def app_error_response(exc: AppError, request_id: Optional[str] = None) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.code, exc.message, exc.details, request_id),
        headers=headers,
    )


def _driver_code(exc: SQLAlchemyError) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def translate_database_error(exc: SQLAlchemyError) -> AppError:
    """
    Translate an ORM/driver error into the application taxonomy.

    Args:
        exc: The SQLAlchemy exception

    Returns:
        AppError subclass describing the failure without driver details
    """
    if isinstance(exc, NoResultFound):
        return NotFoundError("Record not found")

    if isinstance(exc, IntegrityError):
        code = _driver_code(exc)
        text = str(exc.orig).lower() if exc.orig is not None else ""
        if code in UNIQUE_VIOLATION_CODES or "unique constraint" in text or "duplicate key" in text:
            return ConflictError("A record with the same unique value already exists")
        if code in FOREIGN_KEY_VIOLATION_CODES or "foreign key constraint" in text:
            return BadRequestError("A referenced record does not exist or is still in use")
        return BadRequestError("The data violates a database constraint")

    if isinstance(exc, OperationalError):
        return ServiceUnavailableError()

    error = AppError("A database error occurred")
    error.code = "DATABASE_ERROR"
    return error


def format_validation_errors(errors: list[dict[str, Any]], skip_section: bool = False) -> list[dict[str, str]]:
    """
    Format pydantic/FastAPI validation errors into {field, message} entries.

    Args:
        errors: Output of ValidationError.errors()
        skip_section: Drop the leading "body"/"query"/"path" location element

    Returns:
        List of formatted validation errors
    """
    formatted = []
    for error in errors:
        loc = list(error.get("loc", ()))
        if skip_section and loc and loc[0] in ("body", "query", "path", "header", "cookie"):
            loc = loc[1:]
        formatted.append({
            "field": ".".join(str(part) for part in loc),
            "message": sanitize_error_message(str(error.get("msg", ""))),
        })
    return formatted


def _request_id(scope: dict) -> Optional[str]:
    for key, value in scope.get("headers", []):
        if key == b"x-request-id":
            return value.decode("latin-1")
    return None


def unexpected_error_response(
    exc: Exception,
    method: str,
    path: str,
    expose_details: bool,
    request_id: Optional[str] = None,
) -> JSONResponse:
    """Log an unhandled exception and build a 500 response."""
    logger.error(
        f"Unhandled exception: {method} {path} - "
        f"{type(exc).__name__}: {sanitize_error_message(str(exc))}",
        exc_info=exc,
    )
    message = GENERIC_ERROR_MESSAGE
    if expose_details:
        message = sanitize_error_message(str(exc)) or GENERIC_ERROR_MESSAGE
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope("INTERNAL_SERVER_ERROR", message, request_id=request_id),
    )


class ErrorHandlingMiddleware:
    """
    Last-resort error handling for anything the exception handlers did not catch.

    Unexpected errors are logged with their traceback; the response carries a
    generic message in production and the sanitized exception text otherwise.
    """

    def __init__(self, app: Callable, expose_details: bool = False):
        """
        Initialize error handling middleware.

        Args:
            app: The ASGI application
            expose_details: Whether to return exception text to clients
        """
        self.app = app
        self.expose_details = expose_details

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: dict) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            if response_started:
                raise
            response = self._handle_exception(exc, scope)
            await response(scope, receive, send)

    def _handle_exception(self, exc: Exception, scope: dict) -> JSONResponse:
        request_id = _request_id(scope)

        if isinstance(exc, AppError):
            return app_error_response(exc, request_id)

        if isinstance(exc, SQLAlchemyError):
            logger.error(
                f"Database error: {scope.get('method')} {scope.get('path')}",
                exc_info=exc,
            )
            return app_error_response(translate_database_error(exc), request_id)

        return unexpected_error_response(
            exc,
            scope.get("method", "unknown"),
            scope.get("path", "unknown"),
            self.expose_details,
            request_id,
        )


def setup_error_handlers(app):
    """
    Set up exception handlers for FastAPI application.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        """Handle application errors raised by services and dependencies."""
        if exc.status_code >= 500:
            logger.error(f"{exc.code}: {request.method} {request.url.path} - {exc.message}")
        else:
            logger.info(f"{exc.code}: {request.method} {request.url.path} - {exc.message}")
        return app_error_response(exc, request.headers.get("x-request-id"))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle validation errors raised by FastAPI's own parameter parsing."""
        error = SchemaValidationError(
            "Invalid input",
            details=format_validation_errors(exc.errors(), skip_section=True),
        )
        logger.info(f"Validation error: {request.method} {request.url.path} - {error.details}")
        return app_error_response(error, request.headers.get("x-request-id"))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions (unknown routes, wrong methods...)."""
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(
                "HTTP_ERROR",
                sanitize_error_message(str(exc.detail)),
                request_id=request.headers.get("x-request-id"),
            ),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        """Translate database errors; driver messages are only logged."""
        logger.error(
            f"Database error: {request.method} {request.url.path} - {type(exc).__name__}",
            exc_info=exc,
        )
        return app_error_response(
            translate_database_error(exc), request.headers.get("x-request-id")
        )
