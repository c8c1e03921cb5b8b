"""
Application error taxonomy.

Every error raised by services and middleware derives from AppError, which
carries the HTTP status, a machine-readable code and a human message. The
error handlers in core.middleware.error_handling turn these into the uniform
error envelope.
"""

from typing import Any, Optional


class AppError(Exception):
    """Base class for all application errors."""

    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[list[dict[str, Any]]] = None,
    ):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class BadRequestError(AppError):
    """The request is malformed or violates a business rule."""

    status_code = 400
    code = "BAD_REQUEST"
    default_message = "Bad request"


class SchemaValidationError(AppError):
    """A request section failed schema validation."""

    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid input"


class UnauthorizedError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "You don't have permission to perform this action"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Resource already exists"


class UnprocessableEntityError(AppError):
    """Input is well-formed but inconsistent with stored data."""

    status_code = 422
    code = "UNPROCESSABLE_ENTITY"
    default_message = "Request could not be processed"


class ServiceUnavailableError(AppError):
    status_code = 503
    code = "DATABASE_UNAVAILABLE"
    default_message = "Database service temporarily unavailable"


class RateLimitExceededError(AppError):
    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"
    default_message = "Too many requests. Please try again later."
