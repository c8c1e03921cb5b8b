"""Pagination and sorting helpers shared by list endpoints."""

import math
from typing import Any, Mapping

from sqlalchemy import ColumnElement

from core.errors import BadRequestError


def calculate_pagination(page: int, limit: int, total: int) -> dict[str, int]:
    """Build the pagination block returned alongside list data."""
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }


def get_sort_clause(
    sort_by: str | None,
    sort_order: str,
    sortable: Mapping[str, Any],
    default: str = "createdAt",
) -> ColumnElement:
    """
    Resolve a client-supplied sort field to an ORDER BY clause.

    Args:
        sort_by: Wire name of the field to sort by (camelCase), or None
        sort_order: "asc" or "desc"
        sortable: Mapping of wire names to model columns
        default: Wire name used when sort_by is empty

    Raises:
        BadRequestError: If sort_by does not name a sortable field
    """
    key = sort_by or default
    column = sortable.get(key)
    if column is None:
        allowed = ", ".join(sorted(sortable))
        raise BadRequestError(f"Cannot sort by '{key}'. Allowed fields: {allowed}")
    return column.asc() if sort_order == "asc" else column.desc()
