"""Job and job question service functions."""

from typing import Any, Dict, List, Optional, Tuple
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from api.schemas.common import PaginationQuery
from api.schemas.jobs import (
    CloneJobBody,
    CreateJobBody,
    CreateQuestionBody,
    NestedOptionBody,
    UpdateJobBody,
    UpdateQuestionBody,
)
from api.services.positions import serialize_position
from core.errors import ConflictError, NotFoundError
from core.utils.formatting import format_datetime
from core.utils.pagination import calculate_pagination, get_sort_clause
from database.models.applications import Answer, Application
from database.models.jobs import Job, Question, QuestionOption
from database.models.positions import Position

logger = logging.getLogger(__name__)

JOB_SORT_FIELDS = {
    "createdAt": Job.created_at,
    "updatedAt": Job.updated_at,
    "title": Job.title,
    "slug": Job.slug,
    "isActive": Job.is_active,
}


# ==================== Serialization ==================== #

def serialize_option(option: QuestionOption) -> Dict[str, Any]:
    return {
        "id": option.id,
        "label": option.label,
        "orderIndex": option.order_index,
        "isActive": option.is_active,
        "questionId": option.question_id,
        "createdAt": format_datetime(option.created_at),
        "updatedAt": format_datetime(option.updated_at),
    }


def serialize_question(
    question: Question,
    options: Optional[List[QuestionOption]] = None,
) -> Dict[str, Any]:
    data = {
        "id": question.id,
        "label": question.label,
        "type": question.type.value,
        "isRequired": question.is_required,
        "order": question.order,
        "jobId": question.job_id,
        "createdAt": format_datetime(question.created_at),
        "updatedAt": format_datetime(question.updated_at),
    }
    if options is not None:
        data["options"] = [serialize_option(option) for option in options]
    return data


def serialize_job(
    job: Job,
    position: Optional[Position] = None,
    questions: Optional[List[Dict[str, Any]]] = None,
    application_count: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Serialize a job to its wire representation.

    Related data is only included when passed in, so callers decide what
    has been loaded.
    """
    data = {
        "id": job.id,
        "title": job.title,
        "description": job.description,
        "slug": job.slug,
        "requiresResume": job.requires_resume,
        "isActive": job.is_active,
        "positionId": job.position_id,
        "createdAt": format_datetime(job.created_at),
        "updatedAt": format_datetime(job.updated_at),
    }
    if position is not None:
        data["position"] = serialize_position(position)
    if questions is not None:
        data["questions"] = questions
    if application_count is not None:
        data["applicationCount"] = application_count
    return data


def serialize_job_detail(job: Job, application_count: Optional[int] = None) -> Dict[str, Any]:
    """Job with position and every question and option (admin view)."""
    return serialize_job(
        job,
        position=job.position,
        questions=[serialize_question(q, options=q.options) for q in job.questions],
        application_count=application_count,
    )


# ==================== Helpers ==================== #

def _build_options(options: Optional[List[NestedOptionBody]]) -> List[QuestionOption]:
    return [
        QuestionOption(label=option.label, order_index=index)
        for index, option in enumerate(options or [])
    ]


def _build_question(data: CreateQuestionBody) -> Question:
    return Question(
        label=data.label,
        type=data.type,
        is_required=data.is_required,
        order=data.order,
        options=_build_options(data.options),
    )


async def _load_job(db: AsyncSession, job_id: str) -> Optional[Job]:
    """Load a job with its position, questions and options."""
    result = await db.execute(
        select(Job)
        .options(
            selectinload(Job.position),
            selectinload(Job.questions).selectinload(Question.options),
        )
        .where(Job.id == job_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _get_job_or_404(db: AsyncSession, job_id: str) -> Job:
    job = await db.get(Job, job_id)
    if not job:
        raise NotFoundError("Job not found")
    return job


async def _get_question_or_404(db: AsyncSession, job_id: str, question_id: str) -> Question:
    result = await db.execute(
        select(Question).where(Question.id == question_id, Question.job_id == job_id)
    )
    question = result.scalar_one_or_none()
    if not question:
        raise NotFoundError("Question not found")
    return question


async def count_applications(db: AsyncSession, job_id: str) -> int:
    result = await db.execute(
        select(func.count()).select_from(Application).where(Application.job_id == job_id)
    )
    return result.scalar() or 0


async def _ensure_no_applications(db: AsyncSession, job_id: str) -> None:
    if await count_applications(db, job_id) > 0:
        raise ConflictError("Job has applications and cannot be modified")


async def _ensure_position_exists(db: AsyncSession, position_id: str) -> None:
    if not await db.get(Position, position_id):
        raise NotFoundError("Position not found")


async def _ensure_slug_available(
    db: AsyncSession,
    slug: str,
    exclude_job_id: Optional[str] = None,
) -> None:
    query = select(Job.id).where(Job.slug == slug)
    if exclude_job_id:
        query = query.where(Job.id != exclude_job_id)
    if (await db.execute(query)).first():
        raise ConflictError(f"A job with slug '{slug}' already exists")


async def _ensure_question_unanswered(db: AsyncSession, question_id: str) -> None:
    result = await db.execute(
        select(func.count()).select_from(Answer).where(Answer.question_id == question_id)
    )
    if (result.scalar() or 0) > 0:
        raise ConflictError("Question has answers and cannot be modified")


# ==================== Jobs ==================== #

async def create_job(db: AsyncSession, data: CreateJobBody) -> Dict[str, Any]:
    """
    Create a job together with any nested questions and options.

    Everything is written in a single transaction.

    Raises:
        NotFoundError: If the position does not exist
        ConflictError: If the slug is already taken
    """
    await _ensure_position_exists(db, data.position_id)
    await _ensure_slug_available(db, data.slug)

    job = Job(
        title=data.title,
        description=data.description,
        slug=data.slug,
        requires_resume=data.requires_resume,
        position_id=data.position_id,
        questions=[_build_question(question) for question in data.questions or []],
    )
    db.add(job)
    await db.commit()

    logger.info(f"Created job {job.id} ({job.slug}) with {len(job.questions)} questions")
    return serialize_job_detail(await _load_job(db, job.id), application_count=0)


async def list_jobs(
    db: AsyncSession,
    query: PaginationQuery,
) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    """
    List jobs with their position and application count.

    Returns:
        (jobs, pagination)
    """
    order = get_sort_clause(query.sort_by, query.sort_order, JOB_SORT_FIELDS)

    total = (await db.execute(select(func.count()).select_from(Job))).scalar() or 0

    application_count = (
        select(func.count(Application.id))
        .where(Application.job_id == Job.id)
        .correlate(Job)
        .scalar_subquery()
    )
    result = await db.execute(
        select(Job, application_count.label("application_count"))
        .options(selectinload(Job.position))
        .order_by(order, Job.id)
        .limit(query.limit)
        .offset(query.offset)
    )

    jobs = [
        serialize_job(job, position=job.position, application_count=count)
        for job, count in result.all()
    ]
    return jobs, calculate_pagination(query.page, query.limit, total)


async def get_job(db: AsyncSession, job_id: str) -> Dict[str, Any]:
    """Get a job with position, questions, options and application count."""
    job = await _load_job(db, job_id)
    if not job:
        raise NotFoundError("Job not found")
    return serialize_job_detail(job, application_count=await count_applications(db, job_id))


async def get_public_job(db: AsyncSession, slug: str) -> Dict[str, Any]:
    """
    Get an active job by slug for the public application form.

    Questions come ordered by ``order``; only active options are returned,
    ordered by ``orderIndex``.

    Raises:
        NotFoundError: If no active job has this slug
    """
    result = await db.execute(
        select(Job)
        .options(
            selectinload(Job.position),
            selectinload(Job.questions).selectinload(Question.options),
        )
        .where(Job.slug == slug, Job.is_active.is_(True))
    )
    job = result.scalar_one_or_none()
    if not job:
        raise NotFoundError("Job not found or no longer accepting applications")

    questions = [
        serialize_question(
            question,
            options=[option for option in question.options if option.is_active],
        )
        for question in job.questions
    ]
    return serialize_job(job, position=job.position, questions=questions)


async def update_job(db: AsyncSession, job_id: str, data: UpdateJobBody) -> Dict[str, Any]:
    """
    Partially update a job.

    Raises:
        NotFoundError: If the job or the new position does not exist
        ConflictError: If the job has applications or the new slug is taken
    """
    job = await _get_job_or_404(db, job_id)
    await _ensure_no_applications(db, job_id)

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "slug" in changes and changes["slug"] != job.slug:
        await _ensure_slug_available(db, changes["slug"], exclude_job_id=job_id)
    if "position_id" in changes and changes["position_id"] != job.position_id:
        await _ensure_position_exists(db, changes["position_id"])

    for field, value in changes.items():
        setattr(job, field, value)

    await db.commit()
    return serialize_job_detail(await _load_job(db, job_id), application_count=0)


async def delete_job(db: AsyncSession, job_id: str) -> None:
    """
    Delete a job; its questions and their options go with it.

    Raises:
        NotFoundError: If the job does not exist
        ConflictError: If the job has applications
    """
    job = await _get_job_or_404(db, job_id)
    await _ensure_no_applications(db, job_id)

    await db.delete(job)
    await db.commit()
    logger.info(f"Deleted job {job_id}")


async def clone_job(db: AsyncSession, job_id: str, data: CloneJobBody) -> Dict[str, Any]:
    """
    Copy a job under a new title and slug.

    Description, resume requirement, position, questions and options are
    copied; the copy starts active with no applications.
    """
    source = await _load_job(db, job_id)
    if not source:
        raise NotFoundError("Job not found")
    await _ensure_slug_available(db, data.slug)

    clone = Job(
        title=data.title,
        description=source.description,
        slug=data.slug,
        requires_resume=source.requires_resume,
        position_id=source.position_id,
        questions=[
            Question(
                label=question.label,
                type=question.type,
                is_required=question.is_required,
                order=question.order,
                options=[
                    QuestionOption(
                        label=option.label,
                        order_index=option.order_index,
                        is_active=option.is_active,
                    )
                    for option in question.options
                ],
            )
            for question in source.questions
        ],
    )
    db.add(clone)
    await db.commit()

    logger.info(f"Cloned job {job_id} into {clone.id} ({clone.slug})")
    return serialize_job_detail(await _load_job(db, clone.id), application_count=0)


async def toggle_job_status(db: AsyncSession, job_id: str) -> Dict[str, Any]:
    """Flip a job between active and inactive."""
    job = await _get_job_or_404(db, job_id)
    job.is_active = not job.is_active
    await db.commit()

    logger.info(f"Job {job_id} is now {'active' if job.is_active else 'inactive'}")
    return serialize_job(job)


# ==================== Questions ==================== #

async def _load_question(db: AsyncSession, question_id: str) -> Question:
    result = await db.execute(
        select(Question)
        .options(selectinload(Question.options))
        .where(Question.id == question_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def add_question(
    db: AsyncSession,
    job_id: str,
    data: CreateQuestionBody,
) -> Dict[str, Any]:
    """Add a question (and its options) to a job."""
    await _get_job_or_404(db, job_id)

    question = _build_question(data)
    question.job_id = job_id
    db.add(question)
    await db.commit()

    question = await _load_question(db, question.id)
    return serialize_question(question, options=question.options)


async def update_question(
    db: AsyncSession,
    job_id: str,
    question_id: str,
    data: UpdateQuestionBody,
) -> Dict[str, Any]:
    """
    Partially update a question of a job.

    Raises:
        NotFoundError: If the question does not belong to the job
        ConflictError: If the question already has answers
    """
    question = await _get_question_or_404(db, job_id, question_id)
    await _ensure_question_unanswered(db, question_id)

    changes = data.model_dump(exclude_unset=True, exclude_none=True, exclude={"options"})
    for field, value in changes.items():
        setattr(question, field, value)

    if data.options is not None:
        question = await _load_question(db, question_id)
        question.options = _build_options(data.options)

    await db.commit()

    question = await _load_question(db, question_id)
    return serialize_question(question, options=question.options)


async def delete_question(db: AsyncSession, job_id: str, question_id: str) -> None:
    """
    Delete a question of a job together with its options.

    Raises:
        NotFoundError: If the question does not belong to the job
        ConflictError: If the question already has answers
    """
    question = await _get_question_or_404(db, job_id, question_id)
    await _ensure_question_unanswered(db, question_id)

    await db.delete(question)
    await db.commit()
    logger.info(f"Deleted question {question_id} from job {job_id}")
