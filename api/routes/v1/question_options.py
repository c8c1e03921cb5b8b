"""
Question option endpoints.

Options are the selectable choices of single and multiple choice questions.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.common import success_response
from api.schemas.question_options import (
    CreateQuestionOptionBody,
    QuestionIdParams,
    QuestionOptionParams,
    ReorderQuestionOptionsBody,
    UpdateQuestionOptionBody,
)
from api.services import question_options as option_service
from core.middleware.validation import validate_body, validate_params
from database.engine import get_db

router = APIRouter(prefix="/questions/{questionId}/options", tags=["question-options"])


@router.get("", summary="List Question Options")
async def list_options(
    params: QuestionIdParams = validate_params(QuestionIdParams),
    db: AsyncSession = Depends(get_db),
):
    return success_response(await option_service.list_options(db, params.question_id))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create Question Option")
async def create_option(
    params: QuestionIdParams = validate_params(QuestionIdParams),
    body: CreateQuestionOptionBody = validate_body(CreateQuestionOptionBody),
    db: AsyncSession = Depends(get_db),
):
    """Create an option; without orderIndex it goes after the last one."""
    result = await option_service.create_option(db, params.question_id, body)
    return success_response(result, message="Option created successfully")


@router.put("/reorder", summary="Reorder Question Options")
async def reorder_options(
    params: QuestionIdParams = validate_params(QuestionIdParams),
    body: ReorderQuestionOptionsBody = validate_body(ReorderQuestionOptionsBody),
    db: AsyncSession = Depends(get_db),
):
    """Set order indexes 0..n-1 following the given list of option ids."""
    result = await option_service.reorder_options(db, params.question_id, body)
    return success_response(result, message="Options reordered successfully")


@router.get("/{optionId}", summary="Get Question Option")
async def get_option(
    params: QuestionOptionParams = validate_params(QuestionOptionParams),
    db: AsyncSession = Depends(get_db),
):
    result = await option_service.get_option(db, params.question_id, params.option_id)
    return success_response(result)


@router.put("/{optionId}", summary="Update Question Option")
async def update_option(
    params: QuestionOptionParams = validate_params(QuestionOptionParams),
    body: UpdateQuestionOptionBody = validate_body(UpdateQuestionOptionBody),
    db: AsyncSession = Depends(get_db),
):
    result = await option_service.update_option(
        db, params.question_id, params.option_id, body
    )
    return success_response(result, message="Option updated successfully")


@router.delete("/{optionId}", summary="Delete Question Option")
async def delete_option(
    params: QuestionOptionParams = validate_params(QuestionOptionParams),
    db: AsyncSession = Depends(get_db),
):
    await option_service.delete_option(db, params.question_id, params.option_id)
    return success_response(message="Option deleted successfully")


@router.patch("/{optionId}/toggle", summary="Toggle Question Option")
async def toggle_option(
    params: QuestionOptionParams = validate_params(QuestionOptionParams),
    db: AsyncSession = Depends(get_db),
):
    result = await option_service.toggle_option(db, params.question_id, params.option_id)
    message = "Option activated" if result["isActive"] else "Option deactivated"
    return success_response(result, message=message)
