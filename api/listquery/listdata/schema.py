"""Entity schemas describing how each entity type can be listed."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Type

from pydantic import BaseModel

from ..errors import NotFoundError
from ..models.entities import Product, Workspace


STRING = "string"
NUMBER = "number"
DATE = "date"
BOOLEAN = "boolean"

FIELD_KINDS = (STRING, NUMBER, DATE, BOOLEAN)

DEFAULT_SORT_FIELD = "date_created"
DEFAULT_SORT_DIRECTION = "DESC"


@dataclass(frozen=True)
class FieldSpec:
    """A field that list requests may filter, sort or search on."""

    name: str
    kind: str
    sortable: bool = False
    searchable: bool = False
    column: Optional[str] = None

    def __post_init__(self):
        if self.kind not in FIELD_KINDS:
            raise ValueError(f"Unknown field kind '{self.kind}' for field '{self.name}'")
        if self.searchable and self.kind != STRING:
            raise ValueError(f"Only string fields can be searchable: '{self.name}'")

    @property
    def column_name(self) -> str:
        return self.column or self.name


@dataclass(frozen=True)
class EntitySchema:
    """Everything the engine needs to know about one entity type.

    ``fields`` lists the fields exposed to list requests, in declaration
    order. Every schema must expose ``date_created`` as a sortable date so
    the default sort always resolves.
    """

    name: str
    table: str
    model: Type[BaseModel]
    fields: Dict[str, FieldSpec]
    active_field: Optional[str] = "active"
    limit_ceiling: Optional[int] = None

    def __post_init__(self):
        created = self.fields.get(DEFAULT_SORT_FIELD)
        if created is None or created.kind != DATE or not created.sortable:
            raise ValueError(f"Schema '{self.name}' must declare a sortable '{DEFAULT_SORT_FIELD}' date field")

    def get_field(self, name: str) -> Optional[FieldSpec]:
        return self.fields.get(name)

    @property
    def searchable_fields(self) -> List[FieldSpec]:
        return [spec for spec in self.fields.values() if spec.searchable]

    @property
    def sortable_fields(self) -> List[FieldSpec]:
        return [spec for spec in self.fields.values() if spec.sortable]


def build_fields(*specs: FieldSpec) -> Dict[str, FieldSpec]:
    """Index field specs by name, preserving declaration order."""
    fields = {}
    for spec in specs:
        if spec.name in fields:
            raise ValueError(f"Duplicate field '{spec.name}'")
        fields[spec.name] = spec
    return fields


def get_field_value(item: Any, path: str) -> Any:
    """Read a possibly nested value from a mapping or attribute object.

    ``path`` uses dot notation (``"owner.name"``). Any missing segment yields
    None rather than raising.

    Args:
        item: Mapping or object to read from
        path: Field name or dotted path

    Returns:
        The value, or None if any segment is missing
    """
    current = item
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, dict):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


_BASE_FIELDS = (
    FieldSpec("id", STRING, sortable=True),
    FieldSpec("name", STRING, sortable=True, searchable=True),
    FieldSpec("description", STRING, sortable=True, searchable=True),
    FieldSpec("active", BOOLEAN),
    FieldSpec("date_created", DATE, sortable=True),
    FieldSpec("date_modified", DATE, sortable=True),
)

WORKSPACE_SCHEMA = EntitySchema(
    name="workspace",
    table="workspaces",
    model=Workspace,
    fields=build_fields(
        *_BASE_FIELDS,
        FieldSpec("private", BOOLEAN),
    ),
)

PRODUCT_SCHEMA = EntitySchema(
    name="product",
    table="products",
    model=Product,
    fields=build_fields(
        *_BASE_FIELDS,
        FieldSpec("price", NUMBER, sortable=True),
        FieldSpec("currency", STRING, sortable=True),
    ),
    limit_ceiling=1000,
)

_REGISTRY: Dict[str, EntitySchema] = {}


def register_entity_schema(schema: EntitySchema) -> EntitySchema:
    """Add a schema to the registry, replacing any schema with the same name."""
    _REGISTRY[schema.name] = schema
    return schema


def get_entity_schema(name: str) -> EntitySchema:
    """Look up a registered schema.

    Raises:
        NotFoundError: If no entity with that name is registered
    """
    schema = _REGISTRY.get(name)
    if schema is None:
        raise NotFoundError(f"Unknown entity '{name}'")
    return schema


def list_entity_schemas() -> Iterable[EntitySchema]:
    return list(_REGISTRY.values())


register_entity_schema(WORKSPACE_SCHEMA)
register_entity_schema(PRODUCT_SCHEMA)
