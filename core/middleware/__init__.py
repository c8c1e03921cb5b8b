"""
Core middleware package.

This package provides the request pipeline components:
- Error handling with sensitive data sanitization
- Structured logging with sensitive data masking
- Redis-based rate limiting
- Bearer token authentication
- Request section validation dependencies
"""

from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    error_envelope,
    setup_error_handlers,
    sanitize_error_message,
    translate_database_error,
)

from core.middleware.logging import (
    StructuredLoggingMiddleware,
    setup_logging,
)

from core.middleware.rate_limiting import (
    RateLimitMiddleware,
    RateLimitRule,
    RateLimitWindow,
    SlidingWindowRateLimiter,
    default_rules,
)

from core.middleware.authentication import (
    AuthenticationMiddleware,
    AuthenticationError,
)

from core.middleware.validation import (
    parse_section,
    validate_body,
    validate_params,
    validate_query,
)

__all__ = [
    # Error handling
    "ErrorHandlingMiddleware",
    "error_envelope",
    "setup_error_handlers",
    "sanitize_error_message",
    "translate_database_error",
    # Logging
    "StructuredLoggingMiddleware",
    "setup_logging",
    # Rate limiting
    "RateLimitMiddleware",
    "RateLimitRule",
    "RateLimitWindow",
    "SlidingWindowRateLimiter",
    "default_rules",
    # Authentication
    "AuthenticationMiddleware",
    "AuthenticationError",
    # Validation
    "parse_section",
    "validate_body",
    "validate_params",
    "validate_query",
]
