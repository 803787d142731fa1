"""Tests for error handling and Problem Details implementation."""

import json
import pytest
from unittest.mock import Mock

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from keyset_pagination import find_paginated
from keyset_pagination.db.memory import InMemoryDocumentStore
from keyset_pagination.errors import register_exception_handlers
from keyset_pagination.errors.handlers import problem_detail_exception_handler
from keyset_pagination.errors.problem_details import (
    ProblemDetail,
    ProblemDetailException,
    PaginationError,
    InvalidCursorError,
    InvalidParametersError,
    StoreFailureError
)


class TestProblemDetail:
    """Test ProblemDetail model."""
    
    def test_problem_detail_defaults(self):
        """Test ProblemDetail with default values."""
        problem = ProblemDetail(title="Test Error", status=400)
        
        assert problem.type == "about:blank"
        assert problem.detail is None
        assert problem.instance is None
    
    def test_problem_detail_ignores_unknown_fields(self):
        """Test ProblemDetail drops fields outside RFC 9457."""
        problem = ProblemDetail(title="Test Error", status=400, field="createdAt")
        assert "field" not in problem.model_dump()


class TestPaginationErrors:
    """Test the pagination error hierarchy."""
    
    def test_invalid_cursor_error(self):
        """Test InvalidCursorError fields."""
        exc = InvalidCursorError("Invalid cursor format: bad padding")
        
        assert isinstance(exc, PaginationError)
        assert isinstance(exc, ProblemDetailException)
        assert exc.status == 400
        assert exc.title == "Invalid Cursor"
        assert exc.detail == "Invalid cursor format: bad padding"
        assert exc.type_uri == "urn:keyset-pagination:invalid-cursor"
        assert str(exc) == "Invalid cursor format: bad padding"
    
    def test_invalid_parameters_error(self):
        """Test InvalidParametersError fields."""
        exc = InvalidParametersError("Use either first or last, not both")
        
        assert exc.status == 400
        assert exc.title == "Invalid Pagination Parameters"
        assert exc.type_uri == "urn:keyset-pagination:invalid-parameters"
    
    def test_store_failure_error(self):
        """Test StoreFailureError fields and default detail."""
        exc = StoreFailureError()
        
        assert exc.status == 502
        assert exc.title == "Store Failure"
        assert exc.detail == "Document store query failed"
    
    def test_default_details(self):
        """Test every error carries a default detail."""
        assert InvalidCursorError().detail == "Invalid cursor"
        assert InvalidParametersError().detail == "Invalid pagination parameters"
        assert StoreFailureError("timeout").detail == "timeout"
    
    def test_errors_are_distinct(self):
        """Test that cursor and parameter errors can be told apart."""
        assert not issubclass(InvalidCursorError, InvalidParametersError)
        assert not issubclass(InvalidParametersError, InvalidCursorError)
    
    def test_to_problem_detail_with_request(self):
        """Test conversion uses the request path as instance."""
        request = Mock(spec=Request)
        request.url.path = "/articles"
        
        exc = InvalidCursorError("bad")
        problem = exc.to_problem_detail(request)
        
        assert problem.instance == "/articles"
        assert problem.detail == "bad"
    
    def test_to_response(self):
        """Test conversion to a problem+json response."""
        exc = InvalidParametersError("Duplicate sort fields: createdAt")
        response = exc.to_response()
        
        assert response.status_code == 400
        assert response.headers["Content-Type"] == "application/problem+json"
        body = json.loads(response.body)
        assert body["title"] == "Invalid Pagination Parameters"
        assert body["detail"] == "Duplicate sort fields: createdAt"


class TestExceptionHandlers:
    """Test exception handlers."""
    
    @pytest.fixture
    def mock_request(self):
        """Create mock request."""
        request = Mock(spec=Request)
        request.url.path = "/test/path"
        request.method = "GET"
        return request
    
    @pytest.mark.asyncio
    async def test_problem_detail_exception_handler(self, mock_request):
        """Test ProblemDetailException handler."""
        exc = InvalidCursorError("Invalid cursor format")
        
        response = await problem_detail_exception_handler(mock_request, exc)
        
        assert response.status_code == 400
        assert response.headers["Content-Type"] == "application/problem+json"
    
    def test_registered_handler_on_app(self, timeline_store):
        """Test that a host app returns problem+json for a bad cursor."""
        app = FastAPI()
        register_exception_handlers(app)
        
        @app.get("/items")
        async def list_items(after: str = None, first: int = None):
            connection = await find_paginated(timeline_store, after=after, first=first)
            return connection.model_dump(by_alias=True, mode="json")
        
        client = TestClient(app)
        
        ok = client.get("/items", params={"first": 2})
        assert ok.status_code == 200
        assert [edge["node"]["_id"] for edge in ok.json()["edges"]] == [1, 2]
        
        response = client.get("/items", params={"after": "not-a-cursor"})
        assert response.status_code == 400
        assert response.headers["content-type"] == "application/problem+json"
        body = response.json()
        assert body["title"] == "Invalid Cursor"
        assert body["instance"] == "/items"
