"""Job and job question schemas."""

from typing import Optional

from pydantic import Field

from api.schemas.common import CamelModel, ResourceId, Slug
from database.models.jobs import QuestionType


# ==================== Questions ==================== #

class NestedOptionBody(CamelModel):
    """Option created together with its question."""

    label: str = Field(min_length=1, max_length=200)


class CreateQuestionBody(CamelModel):
    """Schema for adding a question to a job."""

    label: str = Field(min_length=1, max_length=500, description="Question text")
    type: QuestionType
    is_required: bool = False
    order: int = Field(ge=0, description="Display position within the form")
    options: Optional[list[NestedOptionBody]] = None


class UpdateQuestionBody(CamelModel):
    """Schema for updating a question (partial).

    When ``options`` is given the question's options are replaced.
    """

    label: Optional[str] = Field(None, min_length=1, max_length=500)
    type: Optional[QuestionType] = None
    is_required: Optional[bool] = None
    order: Optional[int] = Field(None, ge=0)
    options: Optional[list[NestedOptionBody]] = None


# ==================== Jobs ==================== #

class CreateJobBody(CamelModel):
    """Schema for creating a job, optionally with its questions."""

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=5000)
    slug: Slug
    requires_resume: bool = False
    position_id: ResourceId
    questions: Optional[list[CreateQuestionBody]] = None


class UpdateJobBody(CamelModel):
    """Schema for updating a job (partial)."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    slug: Optional[Slug] = None
    requires_resume: Optional[bool] = None
    is_active: Optional[bool] = None
    position_id: Optional[ResourceId] = None


class CloneJobBody(CamelModel):
    """Title and slug of the copy."""

    title: str = Field(min_length=1, max_length=200)
    slug: Slug


# ==================== Route parameters ==================== #

class JobIdParams(CamelModel):
    job_id: ResourceId


class JobQuestionParams(CamelModel):
    job_id: ResourceId
    question_id: ResourceId


class JobSlugParams(CamelModel):
    slug: str = Field(min_length=1)
