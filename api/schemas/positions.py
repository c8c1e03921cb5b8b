"""Position schemas."""

from typing import Optional

from pydantic import Field, field_validator

from api.schemas.common import CamelModel


class PositionTextModel(CamelModel):
    """Strips surrounding whitespace from the position text fields."""

    @field_validator("title", "level", "salary_range", mode="before", check_fields=False)
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class CreatePositionBody(PositionTextModel):
    """Schema for creating a position."""

    title: str = Field(min_length=1, max_length=100, description="Position title")
    level: str = Field(min_length=1, max_length=50, description="Seniority level")
    salary_range: str = Field(min_length=1, max_length=100, description="Salary range label")


class UpdatePositionBody(PositionTextModel):
    """Schema for updating a position (partial)."""

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    level: Optional[str] = Field(None, min_length=1, max_length=50)
    salary_range: Optional[str] = Field(None, min_length=1, max_length=100)
