"""Tests for error handling and Problem Details implementation."""

import json

import pytest
from unittest.mock import Mock
from fastapi import Request

from listquery.errors.problem_details import (
    ProblemDetail,
    ProblemDetailException,
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    InternalServerError,
    ServiceUnavailableError,
    QueryValidationError,
    StoreError,
    ConversionError,
    create_problem_response
)


@pytest.fixture
def mock_request():
    request = Mock(spec=Request)
    request.url.path = "/v1/workspace/list-page-data"
    return request


class TestProblemDetail:
    """Test ProblemDetail model."""

    def test_problem_detail_defaults(self):
        problem = ProblemDetail(title="Test Error", status=400)

        assert problem.type == "about:blank"
        assert problem.detail is None
        assert problem.instance is None

    def test_problem_detail_extra_fields(self):
        problem = ProblemDetail(title="Test Error", status=400, field="search.query")
        assert problem.model_dump()["field"] == "search.query"


class TestProblemDetailException:
    """Test the exception hierarchy."""

    @pytest.mark.parametrize("exc, status, title", [
        (BadRequestError("bad"), 400, "Bad Request"),
        (ForbiddenError(), 403, "Forbidden"),
        (NotFoundError(), 404, "Not Found"),
        (InternalServerError(), 500, "Internal Server Error"),
        (ServiceUnavailableError(), 503, "Service Unavailable"),
    ])
    def test_status_and_title(self, exc, status, title):
        assert exc.status == status
        assert exc.title == title

    def test_instance_defaults_to_request_path(self, mock_request):
        problem = NotFoundError("Unknown entity 'widgets'").to_problem_detail(mock_request)
        assert problem.instance == "/v1/workspace/list-page-data"

    def test_to_response_uses_problem_json(self, mock_request):
        response = BadRequestError("bad input").to_response(mock_request)

        assert response.status_code == 400
        assert response.headers["Content-Type"] == "application/problem+json"
        body = json.loads(response.body)
        assert body["detail"] == "bad input"
        assert "type" in body


class TestListQueryErrors:
    """Errors raised by the list engine."""

    def test_query_validation_error_is_bad_request(self):
        exc = QueryValidationError("Search query must be at least 2 characters", field="search.query")

        assert isinstance(exc, BadRequestError)
        assert exc.status == 400
        assert exc.field == "search.query"
        assert exc.type_uri == "urn:listquery:problem:query-validation"
        assert exc.extensions["field"] == "search.query"

    def test_query_validation_error_without_field(self):
        exc = QueryValidationError("bad")
        assert exc.field is None
        assert "field" not in exc.extensions

    def test_store_error(self, mock_request):
        exc = StoreError("Failed to list product records")

        assert isinstance(exc, InternalServerError)
        assert exc.status == 500
        body = json.loads(exc.to_response(mock_request).body)
        assert body["type"] == "urn:listquery:problem:store"
        assert body["detail"] == "Failed to list product records"

    def test_store_error_default_detail(self):
        assert StoreError().detail == "Store access failed"

    def test_conversion_error_carries_item_id(self):
        exc = ConversionError("Cannot convert workspace item", item_id="ws-001")

        assert exc.item_id == "ws-001"
        assert exc.extensions["item_id"] == "ws-001"
        assert exc.type_uri == "urn:listquery:problem:conversion"

    def test_all_are_problem_detail_exceptions(self):
        for exc in (QueryValidationError("x"), StoreError(), ConversionError("x")):
            assert isinstance(exc, ProblemDetailException)


class TestCreateProblemResponse:
    def test_extensions_are_included(self, mock_request):
        response = create_problem_response(
            status=422,
            title="Validation Error",
            detail="Validation failed",
            request=mock_request,
            validation_errors=[{"loc": ["body"], "msg": "bad", "type": "value_error"}]
        )

        body = json.loads(response.body)
        assert response.status_code == 422
        assert body["instance"] == "/v1/workspace/list-page-data"
        assert body["validation_errors"][0]["loc"] == ["body"]
