"""
Application endpoints.

Submission is public (CAPTCHA protected, multipart or JSON); listing,
review, deletion and statistics require an admin.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from api.dependencies import get_client_ip, get_recaptcha_verifier, get_resume_storage
from api.schemas.applications import SubmitApplicationBody
from api.schemas.common import IdParams, PaginationQuery, success_response
from api.schemas.jobs import JobIdParams, JobSlugParams
from api.services import applications as application_service
from api.services.applications import ResumeUpload
from core.config import settings
from core.integrations.recaptcha import RecaptchaVerifier
from core.middleware.validation import parse_section, read_json_body, validate_params, validate_query
from core.storage.local import LocalStorage
from database.engine import get_db

router = APIRouter(prefix="/applications", tags=["applications"])

SUBMISSION_FIELDS = ("answers", "recaptchaToken")

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def read_submission(request: Request) -> tuple[Any, Optional[ResumeUpload]]:
    """
    Read a submission from a form or a JSON body.

    In forms ``answers`` is a JSON string and the optional multipart
    ``resume`` part carries the file. At most one byte more than the upload
    limit is read so oversized files are rejected without buffering them.
    """
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith(FORM_CONTENT_TYPES):
        return await read_json_body(request), None

    async with request.form() as form:
        raw = {key: form.get(key) for key in SUBMISSION_FIELDS if form.get(key) is not None}
        resume = None
        upload = form.get("resume")
        if isinstance(upload, UploadFile) and upload.filename:
            content = await upload.read(settings.max_upload_size + 1)
            resume = ResumeUpload(filename=upload.filename, content=content)
    return raw, resume


@router.post("/submit/{slug}", status_code=status.HTTP_201_CREATED, summary="Submit Application")
async def submit_application(
    request: Request,
    params: JobSlugParams = validate_params(JobSlugParams),
    db: AsyncSession = Depends(get_db),
    verifier: RecaptchaVerifier = Depends(get_recaptcha_verifier),
    storage: LocalStorage = Depends(get_resume_storage),
):
    """Apply to an active job. No authentication; requires a CAPTCHA token."""
    raw, resume = await read_submission(request)
    body = parse_section(SubmitApplicationBody, raw, "body", request)

    result = await application_service.submit_application(
        db,
        params.slug,
        body,
        resume,
        verifier=verifier,
        storage=storage,
        remote_ip=get_client_ip(request),
    )
    return success_response(result, message="Application submitted successfully")


@router.get("", summary="List Applications")
async def list_applications(
    query: PaginationQuery = validate_query(PaginationQuery),
    db: AsyncSession = Depends(get_db),
):
    applications, pagination = await application_service.list_applications(db, query)
    return success_response(applications, pagination=pagination)


@router.get("/stats/overview", summary="Application Statistics")
async def get_application_stats(db: AsyncSession = Depends(get_db)):
    """Total applications, top 10 jobs by applications and the 5 latest submissions."""
    result = await application_service.get_application_stats(db)
    return success_response(result, message="Statistics loaded successfully")


@router.get("/job/{jobId}", summary="List Applications for Job")
async def list_job_applications(
    params: JobIdParams = validate_params(JobIdParams),
    query: PaginationQuery = validate_query(PaginationQuery),
    db: AsyncSession = Depends(get_db),
):
    applications, pagination = await application_service.list_applications(
        db, query, job_id=params.job_id
    )
    return success_response(applications, pagination=pagination)


@router.get("/{id}", summary="Get Application")
async def get_application(
    params: IdParams = validate_params(IdParams),
    db: AsyncSession = Depends(get_db),
):
    """Application with job, position and every answer with its question and option."""
    return success_response(await application_service.get_application(db, params.id))


@router.get("/{id}/resume", summary="Download Resume")
async def download_resume(
    params: IdParams = validate_params(IdParams),
    db: AsyncSession = Depends(get_db),
    storage: LocalStorage = Depends(get_resume_storage),
):
    path = await application_service.get_resume_path(db, params.id, storage)
    return FileResponse(path, media_type="application/pdf", filename=path.name)


@router.delete("/{id}", summary="Delete Application")
async def delete_application(
    params: IdParams = validate_params(IdParams),
    db: AsyncSession = Depends(get_db),
    storage: LocalStorage = Depends(get_resume_storage),
):
    """Delete an application with its answers and stored resume."""
    await application_service.delete_application(db, params.id, storage)
    return success_response(message="Application deleted successfully")
