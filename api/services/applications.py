"""Application service functions: public submission and admin review."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from starlette.concurrency import run_in_threadpool

from api.schemas.applications import SubmitApplicationBody
from api.schemas.common import PaginationQuery
from api.services.jobs import serialize_option, serialize_question
from api.services.positions import serialize_position
from core.config import settings
from core.errors import BadRequestError, NotFoundError, UnprocessableEntityError
from core.integrations.recaptcha import RecaptchaVerifier
from core.storage.local import LocalStorage
from core.utils.formatting import format_datetime, format_file_size
from core.utils.pagination import calculate_pagination, get_sort_clause
from database.models.applications import Answer, Application
from database.models.jobs import Job, Question

logger = logging.getLogger(__name__)

RESUME_EXTENSIONS = {".pdf"}

APPLICATION_SORT_FIELDS = {
    "createdAt": Application.created_at,
    "updatedAt": Application.updated_at,
}


@dataclass
class ResumeUpload:
    """A resume file received with a submission."""

    filename: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


# ==================== Serialization ==================== #

def _job_summary(job: Job) -> Dict[str, Any]:
    data = {"id": job.id, "title": job.title, "slug": job.slug}
    if "position" in job.__dict__ and job.position is not None:
        data["position"] = serialize_position(job.position)
    return data


def serialize_answer(answer: Answer, detailed: bool = False) -> Dict[str, Any]:
    data = {
        "id": answer.id,
        "questionId": answer.question_id,
        "textValue": answer.text_value,
        "questionOptionId": answer.question_option_id,
    }
    if detailed:
        data["question"] = serialize_question(answer.question)
        data["questionOption"] = (
            serialize_option(answer.question_option) if answer.question_option else None
        )
    return data


def serialize_application(
    application: Application,
    answers: Optional[List[Dict[str, Any]]] = None,
    answer_count: Optional[int] = None,
) -> Dict[str, Any]:
    data = {
        "id": application.id,
        "jobId": application.job_id,
        "resumeUrl": application.resume_url,
        "submittedAt": format_datetime(application.created_at),
        "createdAt": format_datetime(application.created_at),
        "updatedAt": format_datetime(application.updated_at),
    }
    if "job" in application.__dict__ and application.job is not None:
        data["job"] = _job_summary(application.job)
    if answers is not None:
        data["answers"] = answers
    if answer_count is not None:
        data["answerCount"] = answer_count
    return data


# ==================== Submission ==================== #

def _validate_resume(resume: ResumeUpload, max_size: int) -> None:
    if Path(resume.filename).suffix.lower() not in RESUME_EXTENSIONS:
        raise BadRequestError("Resume must be a PDF file")
    if resume.size == 0:
        raise BadRequestError("Resume file is empty")
    if resume.size > max_size:
        raise BadRequestError(f"Resume must be at most {format_file_size(max_size)}")


async def submit_application(
    db: AsyncSession,
    slug: str,
    data: SubmitApplicationBody,
    resume: Optional[ResumeUpload],
    verifier: RecaptchaVerifier,
    storage: LocalStorage,
    remote_ip: Optional[str] = None,
    max_resume_size: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Submit an application to an active job.

    The CAPTCHA token is checked first; answers are matched against the
    job's questions and options; the resume (if any) is stored before the
    application and its answers are written in one transaction.

    Raises:
        BadRequestError: CAPTCHA rejected, required question unanswered or
            invalid/missing resume
        NotFoundError: No active job with this slug
        UnprocessableEntityError: An answer references a question or option
            outside this job
    """
    if not await verifier.verify(data.recaptcha_token, remote_ip):
        raise BadRequestError("reCAPTCHA verification failed")

    result = await db.execute(
        select(Job)
        .options(selectinload(Job.questions).selectinload(Question.options))
        .where(Job.slug == slug, Job.is_active.is_(True))
    )
    job = result.scalar_one_or_none()
    if not job:
        raise NotFoundError("Job not found or no longer accepting applications")

    questions = {question.id: question for question in job.questions}
    for answer in data.answers:
        question = questions.get(answer.question_id)
        if question is None:
            raise UnprocessableEntityError(
                f"Question {answer.question_id} does not belong to this job"
            )
        if answer.question_option_id and answer.question_option_id not in {
            option.id for option in question.options
        }:
            raise UnprocessableEntityError(
                f"Option {answer.question_option_id} does not belong to question {question.id}"
            )

    answered = {answer.question_id for answer in data.answers}
    for question in job.questions:
        if question.is_required and question.id not in answered:
            raise BadRequestError(f"Question '{question.label}' is required")

    if job.requires_resume and resume is None:
        raise BadRequestError("A resume is required for this job")

    resume_url = None
    if resume is not None:
        _validate_resume(resume, max_resume_size or settings.max_upload_size)
        resume_url = await run_in_threadpool(storage.save, resume.content, resume.filename)

    application = Application(
        job_id=job.id,
        resume_url=resume_url,
        answers=[
            Answer(
                question_id=answer.question_id,
                text_value=answer.text_value or None,
                question_option_id=answer.question_option_id or None,
            )
            for answer in data.answers
        ],
    )
    db.add(application)
    try:
        await db.commit()
    except SQLAlchemyError:
        if resume_url:
            await run_in_threadpool(storage.delete, resume_url)
        raise

    logger.info(
        f"Application {application.id} submitted for job {job.id} "
        f"({len(application.answers)} answers, resume={'yes' if resume_url else 'no'})"
    )
    return {
        "id": application.id,
        "jobId": job.id,
        "submittedAt": format_datetime(application.created_at),
        "answers": [serialize_answer(answer) for answer in application.answers],
    }


# ==================== Review ==================== #

async def list_applications(
    db: AsyncSession,
    query: PaginationQuery,
    job_id: Optional[str] = None,
) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    """
    List applications, optionally restricted to one job.

    Returns:
        (applications, pagination)
    """
    order = get_sort_clause(query.sort_by, query.sort_order, APPLICATION_SORT_FIELDS)

    if job_id is not None and not await db.get(Job, job_id):
        raise NotFoundError("Job not found")

    count_query = select(func.count()).select_from(Application)
    if job_id is not None:
        count_query = count_query.where(Application.job_id == job_id)
    total = (await db.execute(count_query)).scalar() or 0

    answer_count = (
        select(func.count(Answer.id))
        .where(Answer.application_id == Application.id)
        .correlate(Application)
        .scalar_subquery()
    )
    list_query = (
        select(Application, answer_count.label("answer_count"))
        .options(selectinload(Application.job).selectinload(Job.position))
        .order_by(order, Application.id)
        .limit(query.limit)
        .offset(query.offset)
    )
    if job_id is not None:
        list_query = list_query.where(Application.job_id == job_id)

    result = await db.execute(list_query)
    applications = [
        serialize_application(application, answer_count=count)
        for application, count in result.all()
    ]
    return applications, calculate_pagination(query.page, query.limit, total)


async def _get_application_or_404(db: AsyncSession, application_id: str) -> Application:
    application = await db.get(Application, application_id)
    if not application:
        raise NotFoundError("Application not found")
    return application


async def get_application(db: AsyncSession, application_id: str) -> Dict[str, Any]:
    """Application with job, position and answers (question and selected option)."""
    result = await db.execute(
        select(Application)
        .options(
            selectinload(Application.job).selectinload(Job.position),
            selectinload(Application.answers).selectinload(Answer.question),
            selectinload(Application.answers).selectinload(Answer.question_option),
        )
        .where(Application.id == application_id)
    )
    application = result.scalar_one_or_none()
    if not application:
        raise NotFoundError("Application not found")

    answers = sorted(application.answers, key=lambda answer: answer.question.order)
    return serialize_application(
        application,
        answers=[serialize_answer(answer, detailed=True) for answer in answers],
    )


async def delete_application(
    db: AsyncSession,
    application_id: str,
    storage: LocalStorage,
) -> None:
    """Delete an application, its answers and its stored resume."""
    application = await _get_application_or_404(db, application_id)
    resume_url = application.resume_url

    await db.delete(application)
    await db.commit()

    if resume_url:
        await run_in_threadpool(storage.delete, resume_url)
    logger.info(f"Deleted application {application_id}")


async def get_resume_path(
    db: AsyncSession,
    application_id: str,
    storage: LocalStorage,
) -> Path:
    """
    Locate the stored resume of an application.

    Raises:
        NotFoundError: If the application or its resume file does not exist
    """
    application = await _get_application_or_404(db, application_id)
    path = storage.resolve(application.resume_url) if application.resume_url else None
    if path is None:
        raise NotFoundError("Resume not found")
    return path


async def get_application_stats(db: AsyncSession) -> Dict[str, Any]:
    """
    Totals used by the admin dashboard.

    Returns:
        totalApplications, applicationsByJob (top 10 jobs by number of
        applications) and recentApplications (latest 5)
    """
    total = (await db.execute(select(func.count()).select_from(Application))).scalar() or 0

    application_count = func.count(Application.id).label("application_count")
    by_job = await db.execute(
        select(Job.id, Job.title, Job.slug, Job.is_active, application_count)
        .outerjoin(Application, Application.job_id == Job.id)
        .group_by(Job.id, Job.title, Job.slug, Job.is_active)
        .order_by(application_count.desc(), Job.title.asc())
        .limit(10)
    )

    recent = await db.execute(
        select(Application)
        .options(selectinload(Application.job))
        .order_by(Application.created_at.desc(), Application.id.desc())
        .limit(5)
    )

    return {
        "totalApplications": total,
        "applicationsByJob": [
            {
                "jobId": row.id,
                "title": row.title,
                "slug": row.slug,
                "isActive": row.is_active,
                "applicationCount": row.application_count,
            }
            for row in by_job.all()
        ],
        "recentApplications": [
            {
                "id": application.id,
                "submittedAt": format_datetime(application.created_at),
                "job": {
                    "id": application.job.id,
                    "title": application.job.title,
                    "slug": application.job.slug,
                },
            }
            for application in recent.scalars().all()
        ],
    }
