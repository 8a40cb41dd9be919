"""List query engine: schemas, compilation and in-memory processing."""

from .schema import (
    FieldSpec,
    EntitySchema,
    get_field_value,
    get_entity_schema,
    register_entity_schema,
    list_entity_schemas
)
from .query import ListQuery, CompiledFilter, CompiledSearch, SortKey, compile_list_query
from .result import ListPageResult, assemble_page, convert_item
from .processor import process_list

__all__ = [
    "FieldSpec",
    "EntitySchema",
    "get_field_value",
    "get_entity_schema",
    "register_entity_schema",
    "list_entity_schemas",
    "ListQuery",
    "CompiledFilter",
    "CompiledSearch",
    "SortKey",
    "compile_list_query",
    "ListPageResult",
    "assemble_page",
    "convert_item",
    "process_list"
]
