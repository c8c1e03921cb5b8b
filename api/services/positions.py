"""Position service functions."""

from typing import Any, Dict, List, Optional, Tuple
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.common import PaginationQuery
from api.schemas.positions import CreatePositionBody, UpdatePositionBody
from core.errors import ConflictError, NotFoundError
from core.utils.formatting import format_datetime
from core.utils.pagination import calculate_pagination, get_sort_clause
from database.models.jobs import Job
from database.models.positions import Position

logger = logging.getLogger(__name__)

POSITION_SORT_FIELDS = {
    "createdAt": Position.created_at,
    "updatedAt": Position.updated_at,
    "title": Position.title,
    "level": Position.level,
    "salaryRange": Position.salary_range,
}


def serialize_position(position: Position, job_count: Optional[int] = None) -> Dict[str, Any]:
    data = {
        "id": position.id,
        "title": position.title,
        "level": position.level,
        "salaryRange": position.salary_range,
        "createdAt": format_datetime(position.created_at),
        "updatedAt": format_datetime(position.updated_at),
    }
    if job_count is not None:
        data["jobCount"] = job_count
    return data


async def _get_position_or_404(db: AsyncSession, position_id: str) -> Position:
    position = await db.get(Position, position_id)
    if not position:
        raise NotFoundError("Position not found")
    return position


async def _count_jobs(db: AsyncSession, position_id: str) -> int:
    result = await db.execute(
        select(func.count()).select_from(Job).where(Job.position_id == position_id)
    )
    return result.scalar() or 0


async def _ensure_unused(db: AsyncSession, position_id: str) -> None:
    if await _count_jobs(db, position_id) > 0:
        raise ConflictError("Position is used by one or more jobs")


async def create_position(db: AsyncSession, data: CreatePositionBody) -> Dict[str, Any]:
    """Create a position."""
    position = Position(
        title=data.title,
        level=data.level,
        salary_range=data.salary_range,
    )
    db.add(position)
    await db.commit()

    logger.info(f"Created position {position.id}")
    return serialize_position(position, job_count=0)


async def list_positions(
    db: AsyncSession,
    query: PaginationQuery,
) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    """
    List positions with the number of jobs using each one.

    Returns:
        (positions, pagination)
    """
    order = get_sort_clause(query.sort_by, query.sort_order, POSITION_SORT_FIELDS)

    total = (await db.execute(select(func.count()).select_from(Position))).scalar() or 0

    job_count = (
        select(func.count(Job.id))
        .where(Job.position_id == Position.id)
        .correlate(Position)
        .scalar_subquery()
    )
    result = await db.execute(
        select(Position, job_count.label("job_count"))
        .order_by(order, Position.id)
        .limit(query.limit)
        .offset(query.offset)
    )

    positions = [
        serialize_position(position, job_count=count)
        for position, count in result.all()
    ]
    return positions, calculate_pagination(query.page, query.limit, total)


async def list_all_positions(db: AsyncSession) -> List[Dict[str, Any]]:
    """All positions, ordered by title, for select inputs."""
    result = await db.execute(
        select(Position.id, Position.title, Position.level, Position.salary_range)
        .order_by(Position.title.asc())
    )
    return [
        {"id": row.id, "title": row.title, "level": row.level, "salaryRange": row.salary_range}
        for row in result.all()
    ]


async def get_position(db: AsyncSession, position_id: str) -> Dict[str, Any]:
    """Get a position with its job count."""
    position = await _get_position_or_404(db, position_id)
    return serialize_position(position, job_count=await _count_jobs(db, position_id))


async def update_position(
    db: AsyncSession,
    position_id: str,
    data: UpdatePositionBody,
) -> Dict[str, Any]:
    """
    Partially update a position.

    Raises:
        NotFoundError: If the position does not exist
        ConflictError: If any job uses the position
    """
    position = await _get_position_or_404(db, position_id)
    await _ensure_unused(db, position_id)

    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(position, field, value)

    await db.commit()
    return serialize_position(position, job_count=0)


async def delete_position(db: AsyncSession, position_id: str) -> None:
    """
    Delete a position.

    Raises:
        NotFoundError: If the position does not exist
        ConflictError: If any job uses the position
    """
    position = await _get_position_or_404(db, position_id)
    await _ensure_unused(db, position_id)

    await db.delete(position)
    await db.commit()
    logger.info(f"Deleted position {position_id}")
