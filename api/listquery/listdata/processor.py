"""In-memory list processing over a materialized collection."""

import logging
from typing import Any, Iterable

from .filters import is_active, matches_all
from .query import ListQuery
from .result import ListPageResult, assemble_page
from .schema import EntitySchema
from .search import score_item
from .sorting import sort_items

logger = logging.getLogger(__name__)


def process_list(records: Iterable[Any], schema: EntitySchema, query: ListQuery) -> ListPageResult:
    """Run the list pipeline over raw records.

    Stages run in a fixed order: active flag, filters, search gate, stable
    sort, count, page slice, conversion. The total is counted after
    filtering and search and before slicing.

    Args:
        records: Raw records in insertion order
        schema: Schema of the listed entity
        query: Compiled list query

    Returns:
        The requested page
    """
    matched = [
        record for record in records
        if is_active(record, schema.active_field) and matches_all(query.filters, record)
    ]

    if query.search is not None:
        matched = [record for record in matched if score_item(record, query.search) is not None]

    ordered = sort_items(matched, query.sort)
    total_items = len(ordered)
    page = ordered[query.offset:query.offset + query.limit]

    logger.debug(
        f"Processed {schema.name} list: {total_items} matching, "
        f"returning {len(page)} from offset {query.offset}"
    )

    return assemble_page(page, schema, query, total_items)
