"""Admin dashboard endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.common import success_response
from api.services import admin as admin_service
from api.services import applications as application_service
from database.engine import get_db

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/dashboard", summary="Dashboard")
async def get_dashboard(db: AsyncSession = Depends(get_db)):
    """Job, application and position totals with the latest applications."""
    result = await admin_service.get_dashboard(db)
    return success_response(result, message="Dashboard data loaded successfully")


@router.get("/stats", summary="Application Statistics")
async def get_stats(db: AsyncSession = Depends(get_db)):
    result = await application_service.get_application_stats(db)
    return success_response(result, message="Statistics loaded successfully")
