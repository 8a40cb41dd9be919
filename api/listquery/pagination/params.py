"""Pagination request/response models and request normalization."""

from typing import Optional, Union

from pydantic import Field, model_validator

from ..models.base import WireModel


DEFAULT_LIMIT = 20
MAX_LIMIT = 100


class OffsetMethod(WireModel):
    """Page-number pagination."""

    page: int = Field(default=1, description="1-based page number")


class CursorMethod(WireModel):
    """Opaque-token pagination."""

    token: str = Field(default="", description="Cursor returned as nextCursor by a previous page")


PaginationMethod = Union[OffsetMethod, CursorMethod]


class PaginationRequest(WireModel):
    """Pagination part of a list request.

    At most one of ``offset`` and ``cursor`` may be given. ``limit`` is not
    range-checked here; out-of-range values are corrected by
    ``normalize_pagination``.
    """

    limit: int = Field(default=0, description="Items per page (defaults to 20, clamped to 100)")
    offset: Optional[OffsetMethod] = Field(default=None, description="Offset pagination")
    cursor: Optional[CursorMethod] = Field(default=None, description="Cursor pagination")

    @model_validator(mode="after")
    def check_single_method(self) -> "PaginationRequest":
        if self.offset is not None and self.cursor is not None:
            raise ValueError("pagination accepts either offset or cursor, not both")
        return self

    @property
    def method(self) -> Optional[PaginationMethod]:
        """The pagination method in use, if any."""
        if self.cursor is not None:
            return self.cursor
        return self.offset

    @property
    def is_cursor(self) -> bool:
        return self.cursor is not None


class PaginationResponse(WireModel):
    """Pagination metadata returned with every list page."""

    total_items: int = Field(description="Items matching filters and search, before pagination")
    current_page: Optional[int] = Field(default=None, description="Current page (offset pagination only)")
    total_pages: Optional[int] = Field(default=None, description="Total pages (offset pagination only)")
    has_next: bool = Field(description="Whether a following page exists")
    has_prev: bool = Field(description="Whether a preceding page exists")
    next_cursor: Optional[str] = Field(default=None, description="Token for the next page")


def normalize_pagination(
    request: Optional[PaginationRequest],
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> PaginationRequest:
    """Apply defaults and clamps to a raw pagination request.

    Never raises: a missing request, a non-positive limit and a non-positive
    page are all corrected. The input is not modified.

    Args:
        request: Raw pagination request, possibly None
        default_limit: Limit used when the requested limit is not positive
        max_limit: Upper bound for the limit

    Returns:
        A fully populated pagination request
    """
    if request is None:
        return PaginationRequest(limit=default_limit, offset=OffsetMethod(page=1))

    limit = request.limit
    if limit <= 0:
        limit = default_limit
    limit = max(1, min(max_limit, limit))

    if request.cursor is not None:
        return PaginationRequest(limit=limit, cursor=CursorMethod(token=request.cursor.token))

    page = request.offset.page if request.offset is not None else 1
    if page <= 0:
        page = 1

    return PaginationRequest(limit=limit, offset=OffsetMethod(page=page))
