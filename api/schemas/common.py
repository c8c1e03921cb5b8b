"""Common Pydantic schemas shared across the API."""

from typing import Annotated, Any, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.utils.validators import SLUG_MAX_LENGTH, is_valid_id


def check_resource_id(value: str) -> str:
    """Ensure a value looks like a generated identifier."""
    if not is_valid_id(value):
        raise ValueError("Invalid identifier")
    return value


ResourceId = Annotated[str, AfterValidator(check_resource_id)]

Slug = Annotated[
    str,
    Field(min_length=1, max_length=SLUG_MAX_LENGTH, pattern=r"^[a-z0-9-]+$"),
]


class CamelModel(BaseModel):
    """Base model whose wire names are camelCase (``isRequired``, ``positionId``...)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# Keeps the row offset inside a signed 64-bit integer
MAX_PAGE = 1_000_000


class PaginationQuery(CamelModel):
    """Pagination and sorting query parameters."""

    page: int = Field(default=1, ge=1, le=MAX_PAGE, description="Page number (1-indexed)")
    limit: int = Field(default=10, ge=1, le=100, description="Items per page")
    sort_by: Optional[str] = Field(None, min_length=1, description="Field to sort by")
    sort_order: Literal["asc", "desc"] = Field(default="desc", description="Sort direction")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class IdParams(CamelModel):
    """Route parameters for /{id} endpoints."""

    id: ResourceId


def success_response(
    data: Any = None,
    message: Optional[str] = None,
    pagination: Optional[dict] = None,
) -> dict:
    """
    Wrap a payload in the success envelope.

    Args:
        data: Response payload (omitted when None)
        message: Human readable message (omitted when None)
        pagination: Pagination metadata for list endpoints

    Returns:
        {"success": True, "data"?: ..., "message"?: ..., "pagination"?: ...}
    """
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    if pagination is not None:
        body["pagination"] = pagination
    return body
