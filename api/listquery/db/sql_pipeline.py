"""Translate a compiled ListQuery into one parameterized CTE query.

The query runs the same stages as the in-memory processor:

    filtered     active flag, filters and search
    sorted       ROW_NUMBER() over the requested order, tie-broken by position
    total_count  count(*) over sorted
    paged        LIMIT $1 OFFSET $2 over sorted

The final select LEFT JOINs the page onto the total so a row carrying
``_total_count`` comes back even when the page is empty; that row has every
entity column NULL and must be skipped by the caller.

Parameters are numbered in a fixed order: ``$1`` limit, ``$2`` offset, one
(field, direction) pair per sort key, then filter values, then search
patterns.
"""

from typing import Any, List, Tuple

from ..listdata.filters import as_utc_datetime
from ..listdata.query import CompiledFilter, CompiledSearch, ListQuery, SortKey
from ..listdata.schema import DEFAULT_SORT_FIELD, STRING, EntitySchema, FieldSpec
from ..models.list_page import (
    BooleanFilter,
    DateFilter,
    ListFilter,
    NumberFilter,
    RangeFilter,
    StringFilter,
)

TOTAL_COUNT_COLUMN = "_total_count"
ROW_NUMBER_COLUMN = "_row_number"
POSITION_COLUMN = "position"

NUMBER_OPERATORS = {
    "equals": "=",
    "not_equals": "<>",
    "greater_than": ">",
    "greater_than_or_equal": ">=",
    "less_than": "<",
    "less_than_or_equal": "<=",
}


def quote_ident(name: str) -> str:
    """Quote a SQL identifier."""
    return '"' + name.replace('"', '""') + '"'


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class _Params:
    """Collects bind values and hands out their $N placeholders."""

    def __init__(self):
        self.values: List[Any] = []

    def add(self, value: Any) -> str:
        self.values.append(value)
        return f"${len(self.values)}"


def _column(alias: str, spec: FieldSpec) -> str:
    return f"{alias}.{quote_ident(spec.column_name)}"


def _sort_value(alias: str, spec: FieldSpec) -> str:
    column = _column(alias, spec)
    if spec.kind == STRING:
        # Byte order of UTF-8 matches code point order
        return f'{column} COLLATE "C"'
    return column


def build_order_terms(schema: EntitySchema, sort: Tuple[SortKey, ...], params: _Params) -> List[str]:
    """ORDER BY terms: one CASE WHEN branch per sortable field and direction.

    Field and direction are bound parameters compared against the schema's
    sortable fields. A primary field matching no sortable field falls back
    to ``date_created DESC``.
    """
    sortable = schema.sortable_fields
    known = ", ".join(f"'{spec.name}'" for spec in sortable)
    terms = []

    for index, key in enumerate(sort):
        field_param = params.add(key.field.name)
        dir_param = params.add(key.direction)

        for spec in sortable:
            value = _sort_value("f", spec)
            asc_condition = f"{field_param} = '{spec.name}' AND {dir_param} = 'ASC'"
            desc_condition = f"{field_param} = '{spec.name}' AND {dir_param} = 'DESC'"
            if index == 0 and spec.name == DEFAULT_SORT_FIELD:
                desc_condition = f"({desc_condition}) OR {field_param} NOT IN ({known})"
            terms.append(f"CASE WHEN {asc_condition} THEN {value} END ASC NULLS LAST")
            terms.append(f"CASE WHEN {desc_condition} THEN {value} END DESC NULLS FIRST")

    terms.append(f"f.{quote_ident(POSITION_COLUMN)} ASC")
    return terms


def _string_clause(column: str, flt: StringFilter, params: _Params) -> str:
    text = f"COALESCE({column}, '')"
    placeholder = params.add(flt.value)

    if flt.operator == "regex":
        operator = "~" if flt.case_sensitive else "~*"
        return f"{text} {operator} {placeholder}"

    value = placeholder
    if not flt.case_sensitive:
        text = f"lower({text})"
        value = f"lower({placeholder})"

    if flt.operator == "equals":
        return f"{text} = {value}"
    if flt.operator == "not_equals":
        return f"{text} <> {value}"
    if flt.operator == "contains":
        return f"strpos({text}, {value}) > 0"
    if flt.operator == "starts_with":
        return f"left({text}, char_length({value})) = {value}"
    if flt.operator == "ends_with":
        return f"right({text}, char_length({value})) = {value}"
    raise ValueError(f"Unsupported string operator: {flt.operator}")


def _number_clause(column: str, flt: NumberFilter, params: _Params) -> str:
    operator = NUMBER_OPERATORS[flt.operator]
    placeholder = params.add(float(flt.value))
    return f"{column}::double precision {operator} {placeholder}::double precision"


def _date_clause(column: str, flt: DateFilter, params: _Params) -> str:
    target = as_utc_datetime(flt.value)

    if flt.operator == "equals":
        placeholder = params.add(target.date())
        return f"({column} AT TIME ZONE 'UTC')::date = {placeholder}::date"
    if flt.operator == "before":
        return f"{column} < {params.add(target)}::timestamptz"
    if flt.operator == "after":
        return f"{column} > {params.add(target)}::timestamptz"
    if flt.operator == "between":
        start = params.add(target)
        end = params.add(as_utc_datetime(flt.range_end))
        return f"{column} BETWEEN {start}::timestamptz AND {end}::timestamptz"
    raise ValueError(f"Unsupported date operator: {flt.operator}")


def _list_clause(column: str, flt: ListFilter, params: _Params) -> str:
    placeholder = params.add(list(flt.values))
    if flt.operator == "in":
        return f"COALESCE({column}, '') = ANY({placeholder}::text[])"
    return f"COALESCE({column}, '') <> ALL({placeholder}::text[])"


def _range_clause(column: str, flt: RangeFilter, params: _Params) -> str:
    clauses = [f"{column} IS NOT NULL"]
    if flt.min is not None:
        operator = ">=" if flt.include_min else ">"
        clauses.append(f"{column}::double precision {operator} {params.add(float(flt.min))}::double precision")
    if flt.max is not None:
        operator = "<=" if flt.include_max else "<"
        clauses.append(f"{column}::double precision {operator} {params.add(float(flt.max))}::double precision")
    return "(" + " AND ".join(clauses) + ")"


def _boolean_clause(column: str, flt: BooleanFilter, params: _Params) -> str:
    return f"COALESCE({column}, false) = {params.add(flt.value)}::boolean"


def build_filter_clause(compiled: CompiledFilter, params: _Params) -> str:
    """WHERE fragment equivalent to the in-memory evaluation of one filter."""
    flt = compiled.predicate
    column = _column("t", compiled.field)

    if isinstance(flt, StringFilter):
        return _string_clause(column, flt, params)
    if isinstance(flt, NumberFilter):
        return _number_clause(column, flt, params)
    if isinstance(flt, DateFilter):
        return _date_clause(column, flt, params)
    if isinstance(flt, ListFilter):
        return _list_clause(column, flt, params)
    if isinstance(flt, RangeFilter):
        return _range_clause(column, flt, params)
    if isinstance(flt, BooleanFilter):
        return _boolean_clause(column, flt, params)
    raise ValueError(f"Unsupported filter type: {type(flt).__name__}")


def build_search_clause(search: CompiledSearch, params: _Params) -> str:
    """Match when any token occurs, case-insensitively, in any searched field."""
    if not search.tokens or not search.fields:
        return "FALSE"

    alternatives = []
    for token in search.tokens:
        placeholder = params.add(f"%{escape_like(token)}%")
        for spec in search.fields:
            alternatives.append(f"COALESCE({_column('t', spec)}, '') ILIKE {placeholder} ESCAPE '\\'")

    return "(" + " OR ".join(alternatives) + ")"


def build_list_page_query(schema: EntitySchema, query: ListQuery) -> Tuple[str, List[Any]]:
    """
    Build the list-page CTE query for an entity.

    Args:
        schema: Schema of the listed entity
        query: Compiled list query

    Returns:
        Tuple of (sql, parameters)
    """
    params = _Params()
    params.add(query.limit)
    params.add(query.offset)

    order_terms = build_order_terms(schema, query.sort, params)

    conditions = []
    if schema.active_field is not None:
        active = schema.get_field(schema.active_field)
        active_column = active.column_name if active is not None else schema.active_field
        conditions.append(f"t.{quote_ident(active_column)} IS NOT FALSE")

    for compiled in query.filters:
        conditions.append(build_filter_clause(compiled, params))

    if query.search is not None:
        conditions.append(build_search_clause(query.search, params))

    where_clause = "\n          AND ".join(conditions) if conditions else "TRUE"
    order_clause = ",\n                ".join(order_terms)

    sql = f"""
    WITH filtered AS (
        SELECT t.*
        FROM {quote_ident(schema.table)} t
        WHERE {where_clause}
    ),
    sorted AS (
        SELECT f.*, ROW_NUMBER() OVER (
            ORDER BY
                {order_clause}
        ) AS {ROW_NUMBER_COLUMN}
        FROM filtered f
    ),
    total_count AS (
        SELECT count(*) AS total FROM sorted
    ),
    paged AS (
        SELECT s.*
        FROM sorted s
        ORDER BY s.{ROW_NUMBER_COLUMN}
        LIMIT $1 OFFSET $2
    )
    SELECT p.*, tc.total AS {TOTAL_COUNT_COLUMN}
    FROM total_count tc
    LEFT JOIN paged p ON TRUE
    ORDER BY p.{ROW_NUMBER_COLUMN}
    """

    return sql, params.values
