"""
Job posting management endpoints.

Admin CRUD for jobs and their application-form questions, plus the public
lookup used by the application form.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.common import IdParams, PaginationQuery, success_response
from api.schemas.jobs import (
    CloneJobBody,
    CreateJobBody,
    CreateQuestionBody,
    JobIdParams,
    JobQuestionParams,
    JobSlugParams,
    UpdateJobBody,
    UpdateQuestionBody,
)
from api.services import jobs as job_service
from core.middleware.validation import validate_body, validate_params, validate_query
from database.engine import get_db

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("/public/{slug}", summary="Get Public Job")
async def get_public_job(
    params: JobSlugParams = validate_params(JobSlugParams),
    db: AsyncSession = Depends(get_db),
):
    """Active job by slug with its questions and active options. No authentication."""
    return success_response(await job_service.get_public_job(db, params.slug))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create Job")
async def create_job(
    body: CreateJobBody = validate_body(CreateJobBody),
    db: AsyncSession = Depends(get_db),
):
    """Create a job, optionally with its questions and their options."""
    result = await job_service.create_job(db, body)
    return success_response(result, message="Job created successfully")


@router.get("", summary="List Jobs")
async def list_jobs(
    query: PaginationQuery = validate_query(PaginationQuery),
    db: AsyncSession = Depends(get_db),
):
    """Paginated jobs with position and application count."""
    jobs, pagination = await job_service.list_jobs(db, query)
    return success_response(jobs, pagination=pagination)


@router.get("/{id}", summary="Get Job Details")
async def get_job(
    params: IdParams = validate_params(IdParams),
    db: AsyncSession = Depends(get_db),
):
    return success_response(await job_service.get_job(db, params.id))


@router.put("/{id}", summary="Update Job")
async def update_job(
    params: IdParams = validate_params(IdParams),
    body: UpdateJobBody = validate_body(UpdateJobBody),
    db: AsyncSession = Depends(get_db),
):
    """Partially update a job that has no applications."""
    result = await job_service.update_job(db, params.id, body)
    return success_response(result, message="Job updated successfully")


@router.delete("/{id}", summary="Delete Job")
async def delete_job(
    params: IdParams = validate_params(IdParams),
    db: AsyncSession = Depends(get_db),
):
    """Delete a job without applications, with its questions and options."""
    await job_service.delete_job(db, params.id)
    return success_response(message="Job deleted successfully")


@router.post("/{id}/clone", status_code=status.HTTP_201_CREATED, summary="Clone Job")
async def clone_job(
    params: IdParams = validate_params(IdParams),
    body: CloneJobBody = validate_body(CloneJobBody),
    db: AsyncSession = Depends(get_db),
):
    result = await job_service.clone_job(db, params.id, body)
    return success_response(result, message="Job cloned successfully")


@router.patch("/{id}/toggle-status", summary="Toggle Job Status")
async def toggle_job_status(
    params: IdParams = validate_params(IdParams),
    db: AsyncSession = Depends(get_db),
):
    result = await job_service.toggle_job_status(db, params.id)
    message = "Job activated" if result["isActive"] else "Job deactivated"
    return success_response(result, message=message)


# ==================== Questions ==================== #

@router.post("/{jobId}/questions", status_code=status.HTTP_201_CREATED, summary="Add Question")
async def add_question(
    params: JobIdParams = validate_params(JobIdParams),
    body: CreateQuestionBody = validate_body(CreateQuestionBody),
    db: AsyncSession = Depends(get_db),
):
    result = await job_service.add_question(db, params.job_id, body)
    return success_response(result, message="Question created successfully")


@router.put("/{jobId}/questions/{questionId}", summary="Update Question")
async def update_question(
    params: JobQuestionParams = validate_params(JobQuestionParams),
    body: UpdateQuestionBody = validate_body(UpdateQuestionBody),
    db: AsyncSession = Depends(get_db),
):
    """Update a question that has no answers; given options replace the existing ones."""
    result = await job_service.update_question(db, params.job_id, params.question_id, body)
    return success_response(result, message="Question updated successfully")


@router.delete("/{jobId}/questions/{questionId}", summary="Delete Question")
async def delete_question(
    params: JobQuestionParams = validate_params(JobQuestionParams),
    db: AsyncSession = Depends(get_db),
):
    await job_service.delete_question(db, params.job_id, params.question_id)
    return success_response(message="Question deleted successfully")
