"""Admin dashboard service functions."""

from typing import Any, Dict
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.services.applications import get_application_stats
from database.models.jobs import Job
from database.models.positions import Position

logger = logging.getLogger(__name__)


async def get_dashboard(db: AsyncSession) -> Dict[str, Any]:
    """
    Aggregate the dashboard figures.

    Returns:
        totalJobs, totalApplications, totalPositions, recentApplications and
        jobStats ({active, inactive})
    """
    stats = await get_application_stats(db)

    rows = await db.execute(select(Job.is_active, func.count(Job.id)).group_by(Job.is_active))
    by_status = {bool(is_active): count for is_active, count in rows.all()}

    total_positions = (
        await db.execute(select(func.count()).select_from(Position))
    ).scalar() or 0

    active = by_status.get(True, 0)
    inactive = by_status.get(False, 0)
    return {
        "totalJobs": active + inactive,
        "totalApplications": stats["totalApplications"],
        "totalPositions": total_positions,
        "recentApplications": stats["recentApplications"],
        "jobStats": {"active": active, "inactive": inactive},
    }
