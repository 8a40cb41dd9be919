"""Tests for list request compilation."""

import pytest

from listquery.errors import QueryValidationError
from listquery.listdata.query import compile_list_query
from listquery.listdata.schema import PRODUCT_SCHEMA, WORKSPACE_SCHEMA
from listquery.models.list_page import (
    BooleanFilter,
    DateFilter,
    ListPageRequest,
    NumberFilter,
    RangeFilter,
    SearchOptions,
    SearchSpec,
    SortField,
    SortSpec,
    StringFilter,
)
from listquery.pagination import CursorMethod, OffsetMethod, PaginationRequest


def compile_request(schema=WORKSPACE_SCHEMA, **fields):
    return compile_list_query(ListPageRequest(**fields), schema, default_limit=20, max_limit=100, min_query_length=2)


def sort_pairs(query):
    return [(key.field.name, key.direction) for key in query.sort]


class TestDefaults:
    """Test compilation of empty requests."""

    def test_none_request(self):
        query = compile_list_query(None, WORKSPACE_SCHEMA, default_limit=20, max_limit=100, min_query_length=2)

        assert query.limit == 20
        assert query.offset == 0
        assert query.filters == ()
        assert query.search is None
        assert sort_pairs(query) == [("date_created", "DESC")]

    def test_settings_supply_defaults(self):
        query = compile_list_query(ListPageRequest(), WORKSPACE_SCHEMA)

        assert query.limit == 20

    def test_negative_limit_corrected(self):
        query = compile_request(pagination=PaginationRequest(limit=-5))

        assert query.limit == 20

    def test_offset_from_page(self):
        query = compile_request(pagination=PaginationRequest(limit=10, offset=OffsetMethod(page=3)))

        assert query.offset == 20
        assert query.method.page == 3

    def test_offset_from_cursor(self):
        query = compile_request(pagination=PaginationRequest(limit=10, cursor=CursorMethod(token="offset:40")))

        assert query.offset == 40
        assert query.pagination.is_cursor

    def test_bad_cursor_restarts(self):
        query = compile_request(pagination=PaginationRequest(limit=10, cursor=CursorMethod(token="bogus")))

        assert query.offset == 0


class TestLimitCeiling:
    """Test the hard limit ceiling on schemas that enforce one."""

    def test_above_ceiling_rejected(self):
        with pytest.raises(QueryValidationError) as exc_info:
            compile_request(PRODUCT_SCHEMA, pagination=PaginationRequest(limit=1001))

        assert exc_info.value.field == "pagination.limit"
        assert "1000" in exc_info.value.detail

    def test_at_ceiling_is_clamped(self):
        query = compile_request(PRODUCT_SCHEMA, pagination=PaginationRequest(limit=1000))

        assert query.limit == 100

    def test_schema_without_ceiling_clamps(self):
        query = compile_request(pagination=PaginationRequest(limit=5000))

        assert query.limit == 100


class TestSearchValidation:
    """Test search query validation."""

    def test_two_character_query_accepted(self):
        query = compile_request(search=SearchSpec(query="ab"))

        assert query.search.query == "ab"
        assert query.search.tokens == ("ab",)

    def test_one_character_query_rejected(self):
        with pytest.raises(QueryValidationError) as exc_info:
            compile_request(search=SearchSpec(query="a"))

        assert exc_info.value.status == 400
        assert exc_info.value.field == "search.query"

    def test_query_is_trimmed_before_length_check(self):
        with pytest.raises(QueryValidationError):
            compile_request(search=SearchSpec(query="  a  "))

    def test_default_fields_are_searchable_fields(self):
        query = compile_request(search=SearchSpec(query="desk"))

        assert [spec.name for spec in query.search.fields] == ["name", "description"]
        assert query.search.highlight is True

    def test_search_fields_subset(self):
        query = compile_request(search=SearchSpec(
            query="desk",
            options=SearchOptions(search_fields=["description", "description"], field_weights={"description": 2.0})
        ))

        assert [spec.name for spec in query.search.fields] == ["description"]
        assert query.search.weight("description") == 2.0
        assert query.search.weight("name") == 1.0

    @pytest.mark.parametrize("field_name", ["private", "nope"])
    def test_non_searchable_field_rejected(self, field_name):
        with pytest.raises(QueryValidationError) as exc_info:
            compile_request(search=SearchSpec(query="desk", options=SearchOptions(search_fields=[field_name])))

        assert exc_info.value.field == "search.options.searchFields"


class TestFilterValidation:
    """Test filter binding."""

    def test_unknown_field_rejected(self):
        with pytest.raises(QueryValidationError) as exc_info:
            compile_request(filters=[StringFilter(field="owner", value="x")])

        assert exc_info.value.field == "owner"

    @pytest.mark.parametrize("predicate", [
        NumberFilter(field="name", value=1),
        StringFilter(field="price", value="1"),
        RangeFilter(field="currency", min=1),
        BooleanFilter(field="price", value=True),
        DateFilter(field="name", value="2024-01-01T00:00:00Z"),
    ])
    def test_kind_mismatch_rejected(self, predicate):
        with pytest.raises(QueryValidationError):
            compile_request(PRODUCT_SCHEMA, filters=[predicate])

    def test_between_requires_range_end(self):
        with pytest.raises(QueryValidationError) as exc_info:
            compile_request(filters=[DateFilter(field="date_created", operator="between", value="2024-01-01T00:00:00Z")])

        assert "rangeEnd" in exc_info.value.detail

    def test_invalid_regex_rejected(self):
        with pytest.raises(QueryValidationError) as exc_info:
            compile_request(filters=[StringFilter(field="name", operator="regex", value="([a-z")])

        assert "regular expression" in exc_info.value.detail

    def test_regex_compiled_once(self):
        query = compile_request(filters=[StringFilter(field="name", operator="regex", value="^work")])

        assert query.filters[0].pattern.search("Workspace 1")

    def test_discriminated_union_from_json(self):
        request = ListPageRequest.model_validate({
            "filters": [
                {"type": "range", "field": "price", "min": 100, "includeMax": False},
                {"type": "list", "field": "currency", "operator": "not_in", "values": ["EUR"]},
            ]
        })

        query = compile_list_query(request, PRODUCT_SCHEMA)

        assert isinstance(query.filters[0].predicate, RangeFilter)
        assert query.filters[0].predicate.include_max is False
        assert query.filters[1].field.name == "currency"


class TestSortResolution:
    """Test sort field resolution."""

    def test_unknown_fields_dropped(self):
        query = compile_request(sort=SortSpec(fields=[
            SortField(field="bogus", direction="ASC"),
            SortField(field="name", direction="desc"),
        ]))

        assert sort_pairs(query) == [("name", "DESC")]

    def test_unsortable_fields_dropped(self):
        query = compile_request(sort=SortSpec(fields=[SortField(field="private")]))

        assert sort_pairs(query) == [("date_created", "DESC")]

    def test_duplicates_dropped(self):
        query = compile_request(sort=SortSpec(fields=[
            SortField(field="name", direction="ASC"),
            SortField(field="name", direction="DESC"),
            SortField(field="id", direction="ASC"),
        ]))

        assert sort_pairs(query) == [("name", "ASC"), ("id", "ASC")]

    def test_empty_sort_uses_default(self):
        query = compile_request(sort=SortSpec(fields=[]))

        assert sort_pairs(query) == [("date_created", "DESC")]
