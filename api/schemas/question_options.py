"""Question option schemas."""

from typing import Optional

from pydantic import Field

from api.schemas.common import CamelModel, ResourceId


class QuestionIdParams(CamelModel):
    question_id: ResourceId


class QuestionOptionParams(CamelModel):
    question_id: ResourceId
    option_id: ResourceId


class CreateQuestionOptionBody(CamelModel):
    """Schema for creating an option; without ``orderIndex`` it is appended."""

    label: str = Field(min_length=1, max_length=200)
    order_index: Optional[int] = Field(None, ge=0)


class UpdateQuestionOptionBody(CamelModel):
    label: Optional[str] = Field(None, min_length=1, max_length=200)
    order_index: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ReorderQuestionOptionsBody(CamelModel):
    """Option ids in their new display order."""

    option_ids: list[ResourceId] = Field(min_length=1)
