"""Pagination utilities for list endpoints."""

from dataclasses import dataclass

from fastapi import Query

from realty_api.core.constants import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT
from realty_api.schemas.appointment import Pagination


@dataclass
class PaginationParams:
    """Pagination parameters from query string."""
    page: int
    limit: int


def get_pagination(
    page: int = Query(DEFAULT_PAGE, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description=f"Items per page (max {MAX_LIMIT})"),
) -> PaginationParams:
    """
    Pagination dependency.

    Usage:
        @router.get("/items")
        def list_items(pagination: PaginationParams = Depends(get_pagination)):
            ...
    """
    return PaginationParams(page=page, limit=limit)


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed for total items, rounding up."""
    return (total + limit - 1) // limit if limit > 0 else 0


def build_pagination(total: int, pagination: PaginationParams) -> Pagination:
    """Pagination block for list responses."""
    return Pagination(
        page=pagination.page,
        limit=pagination.limit,
        total=total,
        pages=total_pages(total, pagination.limit),
    )
