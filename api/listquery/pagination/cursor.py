"""Offset/cursor codecs and pagination response math."""

import logging
import math
from typing import Optional, Dict, Any
from urllib.parse import urlencode

from .params import (
    CursorMethod,
    OffsetMethod,
    PaginationMethod,
    PaginationRequest,
    PaginationResponse,
)

logger = logging.getLogger(__name__)

CURSOR_PREFIX = "offset:"

# Largest row offset PostgreSQL accepts for OFFSET (bigint)
MAX_OFFSET = 2**63 - 1


def encode_cursor(offset: int) -> str:
    """Encode a zero-based row offset as a cursor token.

    Args:
        offset: Non-negative row offset

    Returns:
        Cursor token of the form ``offset:<N>``

    Raises:
        ValueError: If the offset is negative
    """
    if offset < 0:
        raise ValueError(f"Cursor offset must be non-negative, got {offset}")
    return f"{CURSOR_PREFIX}{offset}"


def decode_cursor(token: Optional[str]) -> int:
    """Decode a cursor token to a row offset.

    Empty, malformed and negative tokens decode to 0 so that a bad cursor
    resumes from the start instead of failing the request.

    Args:
        token: Cursor token produced by ``encode_cursor``

    Returns:
        Zero-based row offset
    """
    if not token:
        return 0

    if not token.startswith(CURSOR_PREFIX):
        logger.debug(f"Ignoring cursor without offset prefix: {token!r}")
        return 0

    raw = token[len(CURSOR_PREFIX):]
    if not (raw.isascii() and raw.isdigit()):
        logger.debug(f"Ignoring malformed cursor: {token!r}")
        return 0

    return int(raw)


def clamp_offset(offset: int, limit: int) -> int:
    """Bound an offset so that ``offset + limit`` stays within ``MAX_OFFSET``."""
    return min(offset, MAX_OFFSET - limit)


def to_offset(method: Optional[PaginationMethod], limit: int) -> int:
    """Translate a pagination method into a zero-based row offset."""
    if isinstance(method, CursorMethod):
        return clamp_offset(decode_cursor(method.token), limit)
    if isinstance(method, OffsetMethod):
        return clamp_offset((max(method.page, 1) - 1) * limit, limit)
    return 0


def next_offset(method: Optional[PaginationMethod], limit: int) -> int:
    """Row offset at which the window after this one starts."""
    return to_offset(method, limit) + limit


def next_cursor(method: Optional[PaginationMethod], limit: int, total_items: int) -> Optional[str]:
    """Cursor for the following window, or None when this window is the last.

    Args:
        method: Normalized pagination method
        limit: Normalized limit
        total_items: Count of items matching filters and search

    Returns:
        Encoded cursor or None
    """
    offset = next_offset(method, limit)
    if offset >= total_items:
        return None
    return encode_cursor(offset)


def total_pages(total_items: int, limit: int) -> int:
    """Number of pages needed for ``total_items``; never less than 1."""
    return max(1, math.ceil(total_items / limit))


def build_pagination_response(pagination: PaginationRequest, total_items: int) -> PaginationResponse:
    """Build pagination metadata for a normalized request.

    Args:
        pagination: Request already passed through ``normalize_pagination``
        total_items: Count of items matching filters and search

    Returns:
        Pagination metadata for the response envelope
    """
    limit = pagination.limit
    method = pagination.method
    cursor = next_cursor(method, limit, total_items)

    if isinstance(method, CursorMethod):
        return PaginationResponse(
            total_items=total_items,
            current_page=None,
            total_pages=None,
            has_next=cursor is not None,
            # Backward traversal is not supported in cursor mode
            has_prev=False,
            next_cursor=cursor,
        )

    page = method.page if isinstance(method, OffsetMethod) else 1

    return PaginationResponse(
        total_items=total_items,
        current_page=page,
        total_pages=total_pages(total_items, limit),
        has_next=cursor is not None,
        has_prev=page > 1,
        next_cursor=cursor,
    )


def create_link_header(
    base_url: str,
    params: Dict[str, Any],
    next_cursor: Optional[str] = None,
    prev_cursor: Optional[str] = None
) -> Optional[str]:
    """Create Link header for pagination as per RFC 8288.

    Args:
        base_url: Base URL for the resource
        params: Current query parameters
        next_cursor: Cursor for next page
        prev_cursor: Cursor for previous page

    Returns:
        Link header value or None if no links
    """
    links = []
    base_params = {k: v for k, v in params.items() if v is not None and k not in ("cursor", "page")}

    if next_cursor:
        next_url = f"{base_url}?" + urlencode({**base_params, "cursor": next_cursor})
        links.append(f'<{next_url}>; rel="next"')

    if prev_cursor:
        prev_url = f"{base_url}?" + urlencode({**base_params, "cursor": prev_cursor})
        links.append(f'<{prev_url}>; rel="prev"')

    return ", ".join(links) if links else None
