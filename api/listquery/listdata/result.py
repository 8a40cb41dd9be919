"""Assembly of a list page: conversion, search results and pagination metadata."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel, ValidationError

from ..errors import ConversionError
from ..models.list_page import ListPageResponse, SearchMetrics, SearchResult
from ..pagination import PaginationResponse, build_pagination_response
from .schema import EntitySchema, get_field_value
from .search import build_search_metrics, score_item

logger = logging.getLogger(__name__)


@dataclass
class ListPageResult:
    """One page of converted items plus the metadata describing it."""

    items: List[BaseModel]
    pagination: PaginationResponse
    search_results: Optional[List[SearchResult]] = None
    skipped_items: int = 0
    search_metrics: Optional[SearchMetrics] = None

    @property
    def total_items(self) -> int:
        return self.pagination.total_items

    def to_response(self) -> ListPageResponse:
        return ListPageResponse(
            data=self.items,
            pagination=self.pagination,
            search_results=self.search_results,
            skipped_items=self.skipped_items,
            search_metrics=self.search_metrics,
        )


def convert_item(row: Any, schema: EntitySchema) -> BaseModel:
    """Map a raw record into the schema's model.

    Raises:
        ConversionError: If the record does not fit the model
    """
    try:
        if isinstance(row, Mapping):
            return schema.model.model_validate(dict(row))
        return schema.model.model_validate(row, from_attributes=True)
    except ValidationError as e:
        item_id = get_field_value(row, "id")
        raise ConversionError(
            f"Cannot convert {schema.name} item: {e.error_count()} validation errors",
            item_id=str(item_id) if item_id is not None else None
        )


def assemble_page(rows: Sequence[Any], schema: EntitySchema, query, total_items: int) -> ListPageResult:
    """Convert a page of raw records and attach pagination metadata.

    Records that fail conversion are skipped and counted; their search
    results are dropped with them so ``search_results`` stays aligned with
    ``items``. ``total_items`` is reported as given. Search metrics count
    field matches over the converted items only.

    Args:
        rows: Raw records of the page, already filtered, sorted and sliced
        schema: Schema of the listed entity
        query: Compiled ``ListQuery``
        total_items: Count of matching records before pagination

    Returns:
        The assembled page
    """
    items = []
    results = [] if query.search is not None else None
    field_match_counts = {}
    skipped = 0

    for row in rows:
        try:
            item = convert_item(row, schema)
        except ConversionError as e:
            skipped += 1
            logger.warning(f"Skipping {schema.name} item {e.item_id}: {e.detail}")
            continue

        items.append(item)
        if results is not None:
            result = score_item(row, query.search, field_match_counts)
            results.append(result if result is not None else SearchResult(score=0.0, highlights=[]))

    metrics = None
    if query.search is not None:
        metrics = build_search_metrics(query.search, total_items, field_match_counts)

    return ListPageResult(
        items=items,
        pagination=build_pagination_response(query.pagination, total_items),
        search_results=results,
        skipped_items=skipped,
        search_metrics=metrics,
    )
