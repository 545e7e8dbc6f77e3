"""
Pagination Utility Module

Page/page_size query handling shared by the list endpoints. The stores take
``offset``/``limit`` and return ``(items, total)``; this module turns that
pair into the response envelope.
"""
from typing import Any, List, Optional

from fastapi import Query
from pydantic import BaseModel

from taskportal.core.config import settings


class PaginationParams(BaseModel):
    """Standard pagination parameters"""
    page: int = 1
    page_size: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


def pagination_params(
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
) -> PaginationParams:
    """FastAPI dependency: defaults and caps come from settings"""
    size = page_size or settings.DEFAULT_PAGE_SIZE
    return PaginationParams(page=page, page_size=min(size, settings.MAX_PAGE_SIZE))


def create_paginated_response(
    items: List[Any],
    total: int,
    page: int,
    page_size: int
) -> dict:
    """
    Create a paginated response dictionary.

    Args:
        items: List of items for current page
        total: Total count of all items
        page: Current page number
        page_size: Items per page
    """
    total_pages = (total + page_size - 1) // page_size if total > 0 else 1

    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_previous": page > 1
    }
