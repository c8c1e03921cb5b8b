"""
Position management endpoints.

Positions describe a role (title, level, salary range) shared by jobs.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.common import IdParams, PaginationQuery, success_response
from api.schemas.positions import CreatePositionBody, UpdatePositionBody
from api.services import positions as position_service
from core.middleware.validation import validate_body, validate_params, validate_query
from database.engine import get_db

router = APIRouter(prefix="/positions", tags=["positions"])


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create Position")
async def create_position(
    body: CreatePositionBody = validate_body(CreatePositionBody),
    db: AsyncSession = Depends(get_db),
):
    result = await position_service.create_position(db, body)
    return success_response(result, message="Position created successfully")


@router.get("", summary="List Positions")
async def list_positions(
    query: PaginationQuery = validate_query(PaginationQuery),
    db: AsyncSession = Depends(get_db),
):
    """Paginated positions, each with the number of jobs using it."""
    positions, pagination = await position_service.list_positions(db, query)
    return success_response(positions, pagination=pagination)


@router.get("/all", summary="List All Positions")
async def list_all_positions(db: AsyncSession = Depends(get_db)):
    """Every position ordered by title, for select inputs."""
    return success_response(await position_service.list_all_positions(db))


@router.get("/{id}", summary="Get Position")
async def get_position(
    params: IdParams = validate_params(IdParams),
    db: AsyncSession = Depends(get_db),
):
    return success_response(await position_service.get_position(db, params.id))


@router.put("/{id}", summary="Update Position")
async def update_position(
    params: IdParams = validate_params(IdParams),
    body: UpdatePositionBody = validate_body(UpdatePositionBody),
    db: AsyncSession = Depends(get_db),
):
    """Partially update a position that no job uses yet."""
    result = await position_service.update_position(db, params.id, body)
    return success_response(result, message="Position updated successfully")


@router.delete("/{id}", summary="Delete Position")
async def delete_position(
    params: IdParams = validate_params(IdParams),
    db: AsyncSession = Depends(get_db),
):
    """Delete a position that no job uses."""
    await position_service.delete_position(db, params.id)
    return success_response(message="Position deleted successfully")
