"""Pagination normalization, cursor codec and response math."""

from .params import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    OffsetMethod,
    CursorMethod,
    PaginationMethod,
    PaginationRequest,
    PaginationResponse,
    normalize_pagination
)
from .cursor import (
    MAX_OFFSET,
    clamp_offset,
    encode_cursor,
    decode_cursor,
    to_offset,
    next_offset,
    next_cursor,
    total_pages,
    build_pagination_response,
    create_link_header
)

__all__ = [
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "OffsetMethod",
    "CursorMethod",
    "PaginationMethod",
    "PaginationRequest",
    "PaginationResponse",
    "normalize_pagination",
    "MAX_OFFSET",
    "clamp_offset",
    "encode_cursor",
    "decode_cursor",
    "to_offset",
    "next_offset",
    "next_cursor",
    "total_pages",
    "build_pagination_response",
    "create_link_header"
]
