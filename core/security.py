"""
Security utilities: password hashing and admin access tokens.

Passwords are hashed with bcrypt; access tokens are HS256 JWTs carrying the
admin id and email.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt
from starlette.concurrency import run_in_threadpool

from core.config import settings

logger = logging.getLogger(__name__)

JWTPayload = Dict[str, Any]


@dataclass(frozen=True)
class AdminIdentity:
    """Decoded identity attached to authenticated requests."""

    id: str
    email: str


# ==================== Passwords ==================== #

def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """
    Hash a password with bcrypt.

    Args:
        password: Plain text password
        rounds: bcrypt cost factor (defaults to settings.bcrypt_rounds)

    Returns:
        bcrypt hash as a string
    """
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a plain password against a bcrypt hash."""
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


async def hash_password_async(password: str) -> str:
    return await run_in_threadpool(hash_password, password)


async def verify_password_async(password: str, hashed: str) -> bool:
    return await run_in_threadpool(verify_password, password, hashed)


# ==================== Tokens ==================== #

def create_access_token(
    admin_id: str,
    email: str,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed access token for an admin.

    Args:
        admin_id: Admin identifier
        email: Admin email
        secret_key: Signing secret (defaults to settings)
        algorithm: Signing algorithm (defaults to settings)
        expires_delta: Token lifetime (defaults to settings)

    Returns:
        Encoded JWT
    """
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    payload = {
        "sub": admin_id,
        "email": email,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(
        payload,
        secret_key or settings.jwt_secret_key,
        algorithm=algorithm or settings.jwt_algorithm,
    )


def verify_jwt_token(
    token: str,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> JWTPayload:
    """
    Verify signature and expiry of a token and return its payload.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired
        jwt.InvalidTokenError: If the token is malformed or badly signed
    """
    return jwt.decode(
        token,
        secret_key or settings.jwt_secret_key,
        algorithms=[algorithm or settings.jwt_algorithm],
        options={"require": ["sub", "exp"]},
    )


def identity_from_payload(payload: JWTPayload) -> AdminIdentity:
    """Build an AdminIdentity from a verified token payload."""
    admin_id = payload.get("sub")
    email = payload.get("email")
    if not isinstance(admin_id, str) or not isinstance(email, str):
        raise jwt.InvalidTokenError("Token is missing identity claims")
    return AdminIdentity(id=admin_id, email=email)
