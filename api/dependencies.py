"""FastAPI dependencies for dependency injection."""

from typing import Optional

from fastapi import Request

from core.config import settings
from core.errors import UnauthorizedError
from core.integrations.recaptcha import RecaptchaVerifier
from core.security import AdminIdentity
from core.storage.local import LocalStorage


async def get_current_admin(request: Request) -> Optional[AdminIdentity]:
    """
    Get the admin identity attached by the authentication middleware.
    Returns None if the request is not authenticated.
    """
    return request.scope.get("admin")


async def require_admin(request: Request) -> AdminIdentity:
    """Require an authenticated admin."""
    admin = await get_current_admin(request)
    if not admin:
        raise UnauthorizedError("Invalid or missing authentication token")
    return admin


def get_recaptcha_verifier() -> RecaptchaVerifier:
    """reCAPTCHA verifier configured from settings."""
    return RecaptchaVerifier()


def get_resume_storage() -> LocalStorage:
    """Storage for uploaded resumes."""
    return LocalStorage(settings.upload_dir)


def get_client_ip(request: Request) -> Optional[str]:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else None
