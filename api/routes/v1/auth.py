"""
Admin authentication endpoints.

Login is public; the remaining endpoints act on the authenticated admin.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import require_admin
from api.schemas.auth import ChangePasswordBody, LoginBody, UpdateProfileBody
from api.schemas.common import success_response
from api.services import auth as auth_service
from core.middleware.validation import validate_body
from core.security import AdminIdentity
from database.engine import get_db

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", summary="Admin Login")
async def login(
    body: LoginBody = validate_body(LoginBody),
    db: AsyncSession = Depends(get_db),
):
    """Exchange email and password for a bearer token."""
    result = await auth_service.login(db, body)
    return success_response(result, message="Login successful")


@router.post("/change-password", summary="Change Password")
async def change_password(
    body: ChangePasswordBody = validate_body(ChangePasswordBody),
    admin: AdminIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Change the password of the authenticated admin."""
    await auth_service.change_password(db, admin.id, body)
    return success_response(message="Password changed successfully")


@router.get("/profile", summary="Get Profile")
async def get_profile(
    admin: AdminIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await auth_service.get_profile(db, admin.id)
    return success_response(result)


@router.put("/profile", summary="Update Profile")
async def update_profile(
    body: UpdateProfileBody = validate_body(UpdateProfileBody),
    admin: AdminIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Update email and/or password of the authenticated admin."""
    result = await auth_service.update_profile(db, admin.id, body)
    return success_response(result, message="Profile updated successfully")
