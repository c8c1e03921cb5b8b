"""Question option service functions."""

from typing import Any, Dict, List
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.question_options import (
    CreateQuestionOptionBody,
    ReorderQuestionOptionsBody,
    UpdateQuestionOptionBody,
)
from api.services.jobs import serialize_option
from core.errors import BadRequestError, ConflictError, NotFoundError
from database.models.applications import Answer
from database.models.jobs import Question, QuestionOption

logger = logging.getLogger(__name__)


def _with_answer_count(option: QuestionOption, answer_count: int) -> Dict[str, Any]:
    data = serialize_option(option)
    data["answerCount"] = answer_count
    return data


async def _ensure_question_exists(db: AsyncSession, question_id: str) -> None:
    if not await db.get(Question, question_id):
        raise NotFoundError("Question not found")


async def _get_option_or_404(db: AsyncSession, question_id: str, option_id: str) -> QuestionOption:
    result = await db.execute(
        select(QuestionOption).where(
            QuestionOption.id == option_id,
            QuestionOption.question_id == question_id,
        )
    )
    option = result.scalar_one_or_none()
    if not option:
        raise NotFoundError("Question option not found")
    return option


async def _count_answers(db: AsyncSession, option_id: str) -> int:
    result = await db.execute(
        select(func.count()).select_from(Answer).where(Answer.question_option_id == option_id)
    )
    return result.scalar() or 0


async def _ensure_unanswered(db: AsyncSession, option_id: str) -> None:
    if await _count_answers(db, option_id) > 0:
        raise ConflictError("Option has been selected in answers and cannot be modified")


async def next_order_index(db: AsyncSession, question_id: str) -> int:
    """Index after the current maximum, or 0 for a question without options."""
    result = await db.execute(
        select(func.max(QuestionOption.order_index)).where(
            QuestionOption.question_id == question_id
        )
    )
    current = result.scalar()
    return 0 if current is None else current + 1


async def create_option(
    db: AsyncSession,
    question_id: str,
    data: CreateQuestionOptionBody,
) -> Dict[str, Any]:
    """Create an option; without an explicit index it is appended."""
    await _ensure_question_exists(db, question_id)

    order_index = data.order_index
    if order_index is None:
        order_index = await next_order_index(db, question_id)

    option = QuestionOption(
        question_id=question_id,
        label=data.label,
        order_index=order_index,
        is_active=True,
    )
    db.add(option)
    await db.commit()

    logger.info(f"Created option {option.id} on question {question_id}")
    return serialize_option(option)


async def list_options(db: AsyncSession, question_id: str) -> List[Dict[str, Any]]:
    """All options of a question ordered by index, with answer counts."""
    await _ensure_question_exists(db, question_id)

    answer_count = (
        select(func.count(Answer.id))
        .where(Answer.question_option_id == QuestionOption.id)
        .correlate(QuestionOption)
        .scalar_subquery()
    )
    result = await db.execute(
        select(QuestionOption, answer_count.label("answer_count"))
        .where(QuestionOption.question_id == question_id)
        .order_by(QuestionOption.order_index.asc(), QuestionOption.created_at.asc())
        .execution_options(populate_existing=True)
    )
    return [_with_answer_count(option, count) for option, count in result.all()]


async def get_option(db: AsyncSession, question_id: str, option_id: str) -> Dict[str, Any]:
    option = await _get_option_or_404(db, question_id, option_id)
    return _with_answer_count(option, await _count_answers(db, option_id))


async def update_option(
    db: AsyncSession,
    question_id: str,
    option_id: str,
    data: UpdateQuestionOptionBody,
) -> Dict[str, Any]:
    """
    Partially update an option.

    Raises:
        NotFoundError: If the option does not belong to the question
        ConflictError: If the option was selected in any answer
    """
    option = await _get_option_or_404(db, question_id, option_id)
    await _ensure_unanswered(db, option_id)

    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(option, field, value)

    await db.commit()
    return serialize_option(option)


async def delete_option(db: AsyncSession, question_id: str, option_id: str) -> None:
    option = await _get_option_or_404(db, question_id, option_id)
    await _ensure_unanswered(db, option_id)

    await db.delete(option)
    await db.commit()
    logger.info(f"Deleted option {option_id} from question {question_id}")


async def reorder_options(
    db: AsyncSession,
    question_id: str,
    data: ReorderQuestionOptionsBody,
) -> List[Dict[str, Any]]:
    """
    Assign order indexes 0..n-1 following the given id order.

    Raises:
        NotFoundError: If the question does not exist
        BadRequestError: If an id is repeated or not an option of the question
    """
    await _ensure_question_exists(db, question_id)

    result = await db.execute(
        select(QuestionOption).where(
            QuestionOption.id.in_(data.option_ids),
            QuestionOption.question_id == question_id,
        )
    )
    options = {option.id: option for option in result.scalars().all()}

    if len(options) != len(data.option_ids):
        raise BadRequestError("Every option id must belong to this question exactly once")

    for index, option_id in enumerate(data.option_ids):
        options[option_id].order_index = index

    await db.commit()
    return await list_options(db, question_id)


async def toggle_option(db: AsyncSession, question_id: str, option_id: str) -> Dict[str, Any]:
    """Flip an option between active and inactive."""
    option = await _get_option_or_404(db, question_id, option_id)
    option.is_active = not option.is_active
    await db.commit()
    return serialize_option(option)
