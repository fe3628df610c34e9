"""
Common Schemas

Discriminated result shape shared by every handler: callers branch on
``success`` and read ``error`` (a localized message) when it is False.
"""

from pydantic import BaseModel


class ActionResult(BaseModel):
    """Base result: ``success`` plus an optional localized error message."""

    success: bool
    error: str | None = None


class Pagination(BaseModel):
    """Offset pagination metadata for list endpoints."""

    current_page: int
    total_pages: int
    total_notes: int
    page_size: int
