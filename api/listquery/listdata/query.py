"""Compile list requests into a backend-neutral ListQuery.

Both record stores consume only ``ListQuery``; every default, clamp and
validation rule of a list request is applied here exactly once.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Optional, Pattern, Tuple

from ..config import get_settings
from ..errors import QueryValidationError
from ..models.list_page import (
    DateFilter,
    FilterPredicate,
    ListPageRequest,
    SearchSpec,
    SortSpec,
    StringFilter,
)
from ..pagination import PaginationRequest, normalize_pagination, to_offset
from .schema import (
    BOOLEAN,
    DATE,
    DEFAULT_SORT_DIRECTION,
    DEFAULT_SORT_FIELD,
    NUMBER,
    STRING,
    EntitySchema,
    FieldSpec,
)
from .search import tokenize

logger = logging.getLogger(__name__)

# Field kind each filter type applies to
FILTER_FIELD_KINDS = {
    "string": STRING,
    "list": STRING,
    "number": NUMBER,
    "range": NUMBER,
    "date": DATE,
    "boolean": BOOLEAN,
}


@dataclass(frozen=True)
class CompiledFilter:
    """A filter predicate bound to its schema field."""

    predicate: FilterPredicate
    field: FieldSpec
    pattern: Optional[Pattern] = None


@dataclass(frozen=True)
class SortKey:
    field: FieldSpec
    direction: str

    @property
    def descending(self) -> bool:
        return self.direction == "DESC"


@dataclass(frozen=True)
class CompiledSearch:
    """A validated search query with its resolved fields and weights."""

    query: str
    tokens: Tuple[str, ...]
    fields: Tuple[FieldSpec, ...]
    weights: Dict[str, float] = field(default_factory=dict)
    highlight: bool = True

    def weight(self, field_name: str) -> float:
        return self.weights.get(field_name, 1.0)


@dataclass(frozen=True)
class ListQuery:
    """The five-stage list contract, resolved against one entity schema."""

    pagination: PaginationRequest
    limit: int
    offset: int
    filters: Tuple[CompiledFilter, ...] = ()
    sort: Tuple[SortKey, ...] = ()
    search: Optional[CompiledSearch] = None

    @property
    def method(self):
        return self.pagination.method


def compile_list_query(
    request: Optional[ListPageRequest],
    schema: EntitySchema,
    default_limit: Optional[int] = None,
    max_limit: Optional[int] = None,
    min_query_length: Optional[int] = None,
) -> ListQuery:
    """Validate a list request and resolve it against an entity schema.

    Args:
        request: Parsed list request; None lists with all defaults
        schema: Schema of the entity being listed
        default_limit: Page size when none is requested (settings default)
        max_limit: Page size clamp (settings default)
        min_query_length: Shortest accepted search query (settings default)

    Returns:
        Compiled query ready for a record store

    Raises:
        QueryValidationError: If the request cannot be corrected silently
    """
    settings = get_settings()
    if default_limit is None:
        default_limit = settings.default_page_size
    if max_limit is None:
        max_limit = settings.max_page_size
    if min_query_length is None:
        min_query_length = settings.min_search_query_length

    request = request or ListPageRequest()

    if (
        schema.limit_ceiling is not None
        and request.pagination is not None
        and request.pagination.limit > schema.limit_ceiling
    ):
        raise QueryValidationError(
            f"limit must not exceed {schema.limit_ceiling}",
            field="pagination.limit"
        )

    pagination = normalize_pagination(request.pagination, default_limit, max_limit)
    offset = to_offset(pagination.method, pagination.limit)

    query = ListQuery(
        pagination=pagination,
        limit=pagination.limit,
        offset=offset,
        filters=tuple(compile_filter(predicate, schema) for predicate in request.filters),
        sort=resolve_sort(request.sort, schema),
        search=compile_search(request.search, schema, min_query_length),
    )

    logger.debug(
        f"Compiled {schema.name} list query: limit={query.limit} offset={query.offset} "
        f"filters={len(query.filters)} sort={[(k.field.name, k.direction) for k in query.sort]} "
        f"search={query.search.query if query.search else None!r}"
    )
    return query


def compile_filter(predicate: FilterPredicate, schema: EntitySchema) -> CompiledFilter:
    """Bind a filter predicate to its schema field.

    Raises:
        QueryValidationError: Unknown field, kind mismatch, missing range end
            or invalid regular expression
    """
    spec = schema.get_field(predicate.field)
    if spec is None:
        raise QueryValidationError(
            f"Unknown filter field '{predicate.field}' for {schema.name}",
            field=predicate.field
        )

    expected_kind = FILTER_FIELD_KINDS[predicate.type]
    if spec.kind != expected_kind:
        raise QueryValidationError(
            f"Filter type '{predicate.type}' cannot be applied to {spec.kind} field '{spec.name}'",
            field=predicate.field
        )

    if isinstance(predicate, DateFilter) and predicate.operator == "between" and predicate.range_end is None:
        raise QueryValidationError(
            f"Date filter 'between' on '{spec.name}' requires rangeEnd",
            field=predicate.field
        )

    pattern = None
    if isinstance(predicate, StringFilter) and predicate.operator == "regex":
        flags = 0 if predicate.case_sensitive else re.IGNORECASE
        try:
            pattern = re.compile(predicate.value, flags)
        except re.error as e:
            raise QueryValidationError(
                f"Invalid regular expression for '{spec.name}': {e}",
                field=predicate.field
            )

    return CompiledFilter(predicate=predicate, field=spec, pattern=pattern)


def resolve_sort(sort: Optional[SortSpec], schema: EntitySchema) -> Tuple[SortKey, ...]:
    """Resolve requested sort fields, dropping any the schema cannot sort on.

    An empty result falls back to ``date_created DESC``.
    """
    keys = []
    seen = set()
    for requested in (sort.fields if sort else []):
        spec = schema.get_field(requested.field)
        if spec is None or not spec.sortable:
            logger.debug(f"Ignoring unsortable field '{requested.field}' for {schema.name}")
            continue
        if spec.name in seen:
            continue
        seen.add(spec.name)
        keys.append(SortKey(field=spec, direction=requested.direction))

    if not keys:
        keys.append(SortKey(field=schema.fields[DEFAULT_SORT_FIELD], direction=DEFAULT_SORT_DIRECTION))

    return tuple(keys)


def compile_search(
    search: Optional[SearchSpec],
    schema: EntitySchema,
    min_query_length: int,
) -> Optional[CompiledSearch]:
    """Validate a search spec and resolve which fields it covers.

    Raises:
        QueryValidationError: Query too short or non-searchable search field
    """
    if search is None:
        return None

    query = search.query.strip()
    if len(query) < min_query_length:
        raise QueryValidationError(
            f"Search query must be at least {min_query_length} characters",
            field="search.query"
        )

    options = search.options
    fields = schema.searchable_fields
    if options is not None and options.search_fields:
        fields = []
        for name in options.search_fields:
            spec = schema.get_field(name)
            if spec is None or not spec.searchable:
                raise QueryValidationError(
                    f"Field '{name}' is not searchable for {schema.name}",
                    field="search.options.searchFields"
                )
            if spec not in fields:
                fields.append(spec)

    return CompiledSearch(
        query=query,
        tokens=tuple(tokenize(query)),
        fields=tuple(fields),
        weights=dict(options.field_weights) if options is not None else {},
        highlight=options.enable_highlighting if options is not None else True,
    )
