"""
Unit tests for the validation error handler.
"""

import json
from unittest.mock import Mock

import pytest
from fastapi import FastAPI, Request

from route_validator.app.core.containers import Container
from route_validator.app.core.exceptions import ContainerValidationError
from route_validator.app.engine import EngineValidationError, ErrorDetail
from route_validator.app.middleware.error import (
    ValidationErrorHandler,
    setup_validation_error_handling,
)


def make_error(status_code=400):
    error = EngineValidationError(
        [ErrorDetail(message="key is required", path=("key",), type="missing")]
    )
    error.kind = Container.QUERY
    return ContainerValidationError(
        Container.QUERY,
        error,
        "Error validating query. key is required.",
        status_code=status_code,
    )


class TestValidationErrorHandler:
    """Test cases for error handler."""

    @pytest.fixture
    def app(self):
        """Create FastAPI app for testing."""
        return FastAPI()

    def test_setup_error_handlers(self, app):
        """The handler is registered for ContainerValidationError."""
        setup_validation_error_handling(app)

        assert ContainerValidationError in app.exception_handlers

    @pytest.mark.asyncio
    async def test_container_validation_error_handler(self, app):
        """Propagated errors render the standard envelope."""
        ValidationErrorHandler.setup_error_handlers(app)

        mock_request = Mock(spec=Request)
        mock_request.url.path = "/query-check"
        mock_request.method = "GET"
        mock_request.state.correlation_id = "test-correlation-id"

        handler = app.exception_handlers[ContainerValidationError]
        response = await handler(mock_request, make_error(status_code=422))

        assert response.status_code == 422
        response_data = json.loads(response.body)
        error = response_data["error"]
        assert error["type"] == "validation_error"
        assert error["message"] == "Error validating query. key is required."
        assert error["container"] == "query"
        assert error["correlation_id"] == "test-correlation-id"
        assert error["path"] == "/query-check"
        assert error["details"]["validation_errors"] == [
            {"field": "key", "message": "key is required", "type": "missing"}
        ]

    def test_error_repr(self):
        """The exception repr names the container and status."""
        text = repr(make_error())
        assert "query" in text
        assert "400" in text
