"""
Pytest configuration and fixtures for Route Validator tests.
"""

import os
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import Mock

import pytest
from fastapi import Request

# Set up test environment before importing anything else
os.environ.setdefault("ROUTE_VALIDATOR_LOG_LEVEL", "INFO")

from route_validator.app.core.settings import reset_settings
from route_validator.app.middleware.validation import (
    FactoryConfig,
    RequestContext,
    create_validator,
)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Re-read settings from the environment for every test."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def mock_request():
    """Mock FastAPI Request object."""
    mock_req = Mock(spec=Request)
    mock_req.state = Mock()
    mock_req.headers = {}
    mock_req.url = Mock()
    mock_req.url.path = "/test"
    mock_req.method = "GET"
    return mock_req


@pytest.fixture
def make_context(mock_request):
    """Build a RequestContext around the mock request."""

    def _make(**containers: Any) -> RequestContext:
        return RequestContext(mock_request, **containers)

    return _make


@pytest.fixture
def make_request():
    """Build a real Starlette request from raw ASGI pieces."""

    def _make(
        method: str = "GET",
        path: str = "/test",
        query_string: bytes = b"",
        headers: Optional[List[Tuple[str, str]]] = None,
        body: bytes = b"",
        path_params: Optional[Dict[str, Any]] = None,
    ) -> Request:
        scope = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query_string,
            "headers": [
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in (headers or [])
            ],
            "path_params": path_params or {},
        }

        async def receive():
            return {"type": "http.request", "body": body, "more_body": False}

        return Request(scope, receive)

    return _make


@pytest.fixture
def call_next():
    """Async call_next that records how often it ran."""

    async def _call_next():
        _call_next.calls += 1

    _call_next.calls = 0
    return _call_next


@pytest.fixture
def validator():
    """Validator with built-in defaults."""
    return create_validator(FactoryConfig())
