"""Admin authentication and profile service functions."""

from typing import Any, Dict, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.auth import ChangePasswordBody, LoginBody, UpdateProfileBody
from core.config import settings
from core.errors import ConflictError, NotFoundError, UnauthorizedError
from core.security import create_access_token, hash_password_async, verify_password_async
from core.utils.formatting import format_datetime
from database.models.admins import Admin

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def serialize_admin(admin: Admin) -> Dict[str, Any]:
    return {
        "id": admin.id,
        "email": admin.email,
        "isFirstLogin": admin.is_first_login,
        "createdAt": format_datetime(admin.created_at),
        "updatedAt": format_datetime(admin.updated_at),
    }


async def get_admin_by_email(db: AsyncSession, email: str) -> Optional[Admin]:
    result = await db.execute(select(Admin).where(Admin.email == email))
    return result.scalar_one_or_none()


async def _get_admin_or_404(db: AsyncSession, admin_id: str) -> Admin:
    admin = await db.get(Admin, admin_id)
    if not admin:
        raise NotFoundError("Admin not found")
    return admin


async def login(db: AsyncSession, data: LoginBody) -> Dict[str, Any]:
    """
    Verify admin credentials and issue an access token.

    Returns:
        {"token": ..., "admin": {"id", "email", "isFirstLogin"}}

    Raises:
        UnauthorizedError: Unknown email or wrong password (same message)
    """
    admin = await get_admin_by_email(db, data.email)
    if not admin or not await verify_password_async(data.password, admin.password):
        logger.info("Failed admin login attempt")
        raise UnauthorizedError(INVALID_CREDENTIALS)

    token = create_access_token(admin.id, admin.email)
    logger.info(f"Admin {admin.id} logged in")
    return {
        "token": token,
        "admin": {
            "id": admin.id,
            "email": admin.email,
            "isFirstLogin": admin.is_first_login,
        },
    }


async def change_password(db: AsyncSession, admin_id: str, data: ChangePasswordBody) -> None:
    """
    Replace the admin's password after checking the current one.

    Raises:
        NotFoundError: If the admin no longer exists
        UnauthorizedError: If the current password is wrong
    """
    admin = await _get_admin_or_404(db, admin_id)
    if not await verify_password_async(data.current_password, admin.password):
        raise UnauthorizedError("Current password is incorrect")

    admin.password = await hash_password_async(data.new_password)
    admin.is_first_login = False
    await db.commit()
    logger.info(f"Admin {admin_id} changed password")


async def update_profile(db: AsyncSession, admin_id: str, data: UpdateProfileBody) -> Dict[str, Any]:
    """
    Update the admin's email and/or password.

    Setting a password clears the first-login flag.

    Raises:
        ConflictError: If the email belongs to another admin
    """
    admin = await _get_admin_or_404(db, admin_id)

    if data.email and data.email != admin.email:
        if await get_admin_by_email(db, data.email):
            raise ConflictError("Email is already in use")
        admin.email = data.email

    if data.password:
        admin.password = await hash_password_async(data.password)
        admin.is_first_login = False

    await db.commit()
    return serialize_admin(admin)


async def get_profile(db: AsyncSession, admin_id: str) -> Dict[str, Any]:
    return serialize_admin(await _get_admin_or_404(db, admin_id))


async def ensure_default_admin(
    db: AsyncSession,
    email: Optional[str] = None,
    password: Optional[str] = None,
) -> bool:
    """
    Create the configured default admin when it does not exist yet.

    Args:
        db: Database session
        email: Admin email (defaults to settings.admin_email)
        password: Initial password (defaults to settings.admin_password)

    Returns:
        True if an admin was created
    """
    email = email or settings.admin_email
    if await get_admin_by_email(db, email):
        return False

    db.add(
        Admin(
            email=email,
            password=await hash_password_async(password or settings.admin_password),
            is_first_login=True,
        )
    )
    await db.commit()
    logger.info(f"Created default admin {email}")
    return True
