"""
Request validation dependencies.

Each request section (body, query string, route parameters) is validated
against a pydantic model. The coerced model replaces the raw input on
request.state.validated[section] and is handed to the route; failures raise
SchemaValidationError with one {field, message} entry per problem.

Usage:
    @router.post("/")
    async def create_position(
        body: CreatePositionBody = validate_body(CreatePositionBody),
    ):
        ...
"""

import logging
from typing import Any, Literal, Optional, Type, TypeVar

from fastapi import Depends, Request
from pydantic import BaseModel, ValidationError

from core.errors import SchemaValidationError

logger = logging.getLogger(__name__)

Section = Literal["body", "query", "params"]

ModelT = TypeVar("ModelT", bound=BaseModel)

SECTION_MESSAGES = {
    "body": "Invalid request body",
    "query": "Invalid query parameters",
    "params": "Invalid route parameters",
}


def format_errors(exc: ValidationError) -> list[dict[str, str]]:
    """
    Flatten a pydantic ValidationError into {field, message} entries.

    Locations use the wire (alias) names, joined with dots; errors on the
    model as a whole (e.g. a missing body) are reported with an empty field.
    """
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
        }
        for error in exc.errors(include_url=False)
    ]


def parse_section(
    schema: Type[ModelT],
    raw: Any,
    section: Section,
    request: Optional[Request] = None,
) -> ModelT:
    """
    Validate one request section and record the result on the request.

    Args:
        schema: Pydantic model describing the section
        raw: Raw section data (parsed JSON, query dict or path params)
        section: Which section is being validated
        request: Request whose state receives the validated model

    Returns:
        The validated model instance

    Raises:
        SchemaValidationError: If the data does not satisfy the schema
    """
    if raw is None and section != "body":
        raw = {}

    try:
        validated = schema.model_validate(raw)
    except ValidationError as exc:
        details = format_errors(exc)
        logger.debug(f"Validation failed for {section}: {details}")
        raise SchemaValidationError(SECTION_MESSAGES[section], details=details)

    if request is not None:
        store = getattr(request.state, "validated", None)
        if store is None:
            store = {}
            request.state.validated = store
        store[section] = validated

    return validated


async def read_json_body(request: Request) -> Any:
    """Parse the JSON body; an empty or malformed body yields None."""
    body = await request.body()
    if not body:
        return None
    try:
        return await request.json()
    except ValueError:
        return None


def validate_body(schema: Type[ModelT]) -> Any:
    """Dependency validating the JSON request body."""

    async def dependency(request: Request) -> ModelT:
        return parse_section(schema, await read_json_body(request), "body", request)

    return Depends(dependency)


def validate_query(schema: Type[ModelT]) -> Any:
    """Dependency validating the query string."""

    async def dependency(request: Request) -> ModelT:
        return parse_section(schema, dict(request.query_params), "query", request)

    return Depends(dependency)


def validate_params(schema: Type[ModelT]) -> Any:
    """Dependency validating route (path) parameters."""

    async def dependency(request: Request) -> ModelT:
        return parse_section(schema, dict(request.path_params), "params", request)

    return Depends(dependency)
