"""Request and response bodies for list-page-data endpoints."""

from datetime import datetime
from typing import Annotated, Optional, Dict, Any, List, Literal, Union

from pydantic import ConfigDict, Field, field_validator

from .base import WireModel
from ..pagination.params import PaginationRequest, PaginationResponse


StringOperator = Literal["equals", "not_equals", "contains", "starts_with", "ends_with", "regex"]
NumberOperator = Literal[
    "equals", "not_equals",
    "greater_than", "greater_than_or_equal",
    "less_than", "less_than_or_equal",
]
DateOperator = Literal["equals", "before", "after", "between"]
ListOperator = Literal["in", "not_in"]


class StringFilter(WireModel):
    """Text comparison against a string field."""

    type: Literal["string"] = "string"
    field: str = Field(description="Field name (dot notation allowed)")
    operator: StringOperator = Field(default="equals")
    value: str
    case_sensitive: bool = Field(default=False)


class NumberFilter(WireModel):
    """Numeric comparison against a number field."""

    type: Literal["number"] = "number"
    field: str
    operator: NumberOperator = Field(default="equals")
    value: float


class DateFilter(WireModel):
    """Timestamp comparison; ``equals`` matches the same UTC calendar day."""

    type: Literal["date"] = "date"
    field: str
    operator: DateOperator = Field(default="equals")
    value: datetime
    range_end: Optional[datetime] = Field(default=None, description="Inclusive end for 'between'")


class ListFilter(WireModel):
    """Membership test of a string field in a set of values."""

    type: Literal["list"] = "list"
    field: str
    operator: ListOperator = Field(default="in")
    values: List[str] = Field(default_factory=list)


class RangeFilter(WireModel):
    """Numeric range with optional open ends."""

    type: Literal["range"] = "range"
    field: str
    min: Optional[float] = None
    max: Optional[float] = None
    include_min: bool = True
    include_max: bool = True


class BooleanFilter(WireModel):
    type: Literal["boolean"] = "boolean"
    field: str
    value: bool


FilterPredicate = Annotated[
    Union[StringFilter, NumberFilter, DateFilter, ListFilter, RangeFilter, BooleanFilter],
    Field(discriminator="type"),
]


class SortField(WireModel):
    """One (field, direction) pair of a sort specification."""

    field: str
    direction: Literal["ASC", "DESC"] = "ASC"

    @field_validator("direction", mode="before")
    @classmethod
    def normalize_direction(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v


class SortSpec(WireModel):
    fields: List[SortField] = Field(default_factory=list)


class SearchOptions(WireModel):
    """Optional tuning for free-text search."""

    search_fields: Optional[List[str]] = Field(
        default=None,
        description="Subset of searchable fields to search (default: all searchable fields)"
    )
    field_weights: Dict[str, float] = Field(
        default_factory=dict,
        description="Per-field score multipliers (default 1.0)"
    )
    enable_highlighting: bool = Field(default=True)


class SearchSpec(WireModel):
    query: str = Field(description="Free-text query, at least 2 characters after trimming")
    options: Optional[SearchOptions] = None


class ListPageRequest(WireModel):
    """Body of a list-page-data request."""

    search: Optional[SearchSpec] = None
    filters: List[FilterPredicate] = Field(default_factory=list)
    sort: Optional[SortSpec] = None
    pagination: Optional[PaginationRequest] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "search": {"query": "desk"},
                "filters": [
                    {"type": "range", "field": "price", "min": 100, "max": 800},
                    {"type": "boolean", "field": "active", "value": True}
                ],
                "sort": {"fields": [{"field": "price", "direction": "ASC"}]},
                "pagination": {"limit": 10, "offset": {"page": 1}}
            }
        }
    )


class SearchResult(WireModel):
    """Relevance data for one returned item."""

    score: float
    highlights: List[str] = Field(default_factory=list)


class SearchMetrics(WireModel):
    """Summary of a search across the whole result and the returned page."""

    total_results: int = Field(description="Items matching filters and search, before pagination")
    query_time_ms: float = Field(default=0.0, description="Time spent producing the page")
    top_terms: List[str] = Field(
        default_factory=list,
        description="Significant query terms: stop words and terms under 3 characters are dropped"
    )
    field_match_counts: Dict[str, int] = Field(
        default_factory=dict,
        description="Items on this page matched per searched field"
    )


class ListPageResponse(WireModel):
    """Envelope returned by list-page-data endpoints."""

    data: List[Any] = Field(description="Items of the requested page")
    pagination: PaginationResponse
    search_results: Optional[List[SearchResult]] = Field(
        default=None,
        description="Aligned index-for-index with data; present only when a search query was given"
    )
    skipped_items: int = Field(default=0, description="Items on this page dropped because they failed conversion")
    search_metrics: Optional[SearchMetrics] = Field(
        default=None,
        description="Present only when a search query was given"
    )
