"""
Authentication middleware for verifying admin identity.

This middleware:
1. Lets public endpoints and CORS preflight requests through untouched
2. Extracts the bearer token from the Authorization header
3. Verifies the JWT signature and expiry
4. Loads the admin identity into the request scope

Every failure produces the same 401 response so clients cannot tell a
missing token from an expired or forged one.
"""

import logging
import re
from typing import Callable, Iterable, Optional, Pattern

import jwt
from fastapi import Request, status
from fastapi.responses import JSONResponse

from core.middleware.error_handling import error_envelope
from core.security import AdminIdentity, identity_from_payload, verify_jwt_token

logger = logging.getLogger(__name__)

AUTH_ERROR_CODE = "UNAUTHORIZED"
AUTH_ERROR_MESSAGE = "Invalid or missing authentication token"

# Paths that never require authentication, for any method
PUBLIC_ENDPOINTS = [
    "/",
    "/health",
    "/ready",
    "/docs",
    "/docs/oauth2-redirect",
    "/redoc",
    "/openapi.json",
]


def build_public_routes(api_prefix: str) -> list[tuple[str, Pattern[str]]]:
    """
    Build the (method, path pattern) pairs reachable without a token.

    Args:
        api_prefix: Prefix the versioned API is mounted under

    Returns:
        List of (HTTP method, compiled path regex)
    """
    prefix = re.escape(api_prefix.rstrip("/"))
    return [
        ("POST", re.compile(rf"^{prefix}/auth/login/?$")),
        ("GET", re.compile(rf"^{prefix}/jobs/public/[^/]+/?$")),
        ("POST", re.compile(rf"^{prefix}/applications/submit/[^/]+/?$")),
    ]


class AuthenticationError(Exception):
    """Raised when a request cannot be authenticated."""
    pass


class AuthenticationMiddleware:
    """
    Authentication middleware that validates admin bearer tokens.

    Tokens are verified statelessly; a valid token attaches an
    AdminIdentity to scope["admin"] and request.state.admin.
    """

    def __init__(
        self,
        app: Callable,
        jwt_secret: str,
        jwt_algorithm: str = "HS256",
        api_prefix: str = "/api/v1",
        public_routes: Optional[Iterable[tuple[str, Pattern[str]]]] = None,
    ):
        """
        Initialize authentication middleware.

        Args:
            app: ASGI application
            jwt_secret: Secret key for JWT verification
            jwt_algorithm: JWT signing algorithm
            api_prefix: Prefix of the versioned API
            public_routes: Override for the (method, pattern) public routes
        """
        self.app = app
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm
        self.public_routes = list(
            public_routes if public_routes is not None else build_public_routes(api_prefix)
        )

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        """
        Process requests with authentication validation.

        Args:
            scope: ASGI scope dictionary
            receive: ASGI receive function
            send: ASGI send function
        """
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)

        if self._is_public_endpoint(request.method, request.url.path):
            await self.app(scope, receive, send)
            return

        try:
            identity = self._authenticate(request)
        except AuthenticationError as e:
            logger.info(f"Authentication failed: {request.method} {request.url.path} - {e}")
            await self._send_error_response(scope, receive, send, request)
            return

        scope["admin"] = identity
        scope.setdefault("state", {})["admin"] = identity
        await self.app(scope, receive, send)

    def _is_public_endpoint(self, method: str, path: str) -> bool:
        """
        Check if endpoint is public (no auth required).

        Args:
            method: HTTP method
            path: Request path

        Returns:
            True if endpoint is public
        """
        if method == "OPTIONS":
            return True

        if path in PUBLIC_ENDPOINTS:
            return True

        return any(
            method == allowed_method and pattern.match(path)
            for allowed_method, pattern in self.public_routes
        )

    def _extract_token(self, request: Request) -> Optional[str]:
        """
        Extract JWT token from Authorization header.

        Args:
            request: FastAPI request

        Returns:
            JWT token or None
        """
        auth_header = request.headers.get("Authorization")

        if auth_header and auth_header.startswith("Bearer "):
            token = auth_header[7:].strip()  # Remove "Bearer " prefix
            return token or None

        return None

    def _authenticate(self, request: Request) -> AdminIdentity:
        token = self._extract_token(request)
        if not token:
            raise AuthenticationError("No authentication token provided")

        try:
            payload = verify_jwt_token(token, self.jwt_secret, self.jwt_algorithm)
            return identity_from_payload(payload)
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid token: {type(e).__name__}")

    async def _send_error_response(
        self,
        scope: dict,
        receive: Callable,
        send: Callable,
        request: Request,
    ) -> None:
        """
        Send the 401 response for authentication failures.

        Args:
            scope: ASGI scope dictionary
            receive: ASGI receive function
            send: ASGI send function
            request: Current request
        """
        response = JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=error_envelope(
                AUTH_ERROR_CODE,
                AUTH_ERROR_MESSAGE,
                request_id=request.headers.get("x-request-id"),
            ),
            headers={"WWW-Authenticate": "Bearer"},
        )

        await response(scope, receive, send)

