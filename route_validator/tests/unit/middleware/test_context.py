"""
Unit tests for the per-request validation context.
"""

import json

import pytest
from fastapi import HTTPException
from starlette.responses import Response

from route_validator.app.core.containers import Container
from route_validator.app.middleware.validation.context import (
    RequestContext,
    multi_items_to_dict,
)


class TestRequestContextFromRequest:
    """Test cases for building a context from a Starlette request."""

    @pytest.mark.asyncio
    async def test_reads_query_headers_and_params(self, make_request):
        """Query, headers and path params are copied into the context."""
        request = make_request(
            query_string=b"key=1&tag=a&tag=b",
            headers=[("Key", "10"), ("X-Trace", "t-1")],
            path_params={"user_id": "42"},
        )

        ctx = await RequestContext.from_request(request)

        assert ctx.query == {"key": "1", "tag": ["a", "b"]}
        assert ctx.headers["key"] == "10"
        assert ctx.headers["x-trace"] == "t-1"
        assert ctx.params == {"user_id": "42"}
        assert ctx.request_body == {}

    @pytest.mark.asyncio
    async def test_reads_json_body(self, make_request):
        """JSON bodies are decoded."""
        request = make_request(
            method="POST",
            headers=[("content-type", "application/json")],
            body=json.dumps({"key": "5"}).encode(),
        )

        ctx = await RequestContext.from_request(request)

        assert ctx.request_body == {"key": "5"}

    @pytest.mark.asyncio
    async def test_reads_form_body(self, make_request):
        """URL-encoded forms are decoded; repeated fields become lists."""
        request = make_request(
            method="POST",
            headers=[("content-type", "application/x-www-form-urlencoded")],
            body=b"key=5&tag=a&tag=b",
        )

        ctx = await RequestContext.from_request(request)

        assert ctx.request_body == {"key": "5", "tag": ["a", "b"]}

    @pytest.mark.asyncio
    async def test_empty_body(self, make_request):
        """An empty body is an empty mapping."""
        request = make_request(method="POST")
        ctx = await RequestContext.from_request(request)
        assert ctx.request_body == {}

    @pytest.mark.asyncio
    async def test_text_body(self, make_request):
        """Unrecognised content types are kept as text."""
        request = make_request(
            method="POST", headers=[("content-type", "text/plain")], body=b"hello"
        )
        ctx = await RequestContext.from_request(request)
        assert ctx.request_body == "hello"

    @pytest.mark.asyncio
    async def test_invalid_json_body(self, make_request):
        """Malformed JSON is rejected with 400."""
        request = make_request(
            method="POST",
            headers=[("content-type", "application/json")],
            body=b"{not json",
        )

        with pytest.raises(HTTPException) as exc_info:
            await RequestContext.from_request(request)

        assert exc_info.value.status_code == 400
        assert "Invalid JSON" in exc_info.value.detail


class TestRequestContextContainers:
    """Test cases for container state."""

    def test_replace_keeps_original(self, make_context):
        """Replacing a container keeps the raw value as original."""
        ctx = make_context(headers={"key": "10"})

        ctx.replace(Container.HEADERS, {"key": 10})

        assert ctx.headers == {"key": 10}
        assert ctx.original_headers == {"key": "10"}
        assert ctx.is_validated(Container.HEADERS)

    def test_second_replace_keeps_first_original(self, make_context):
        """Stacked validators never overwrite the client's value."""
        ctx = make_context(query={"key": "10"})

        ctx.replace("query", {"key": 10})
        ctx.replace("query", {"key": 10, "page": 1})

        assert ctx.query == {"key": 10, "page": 1}
        assert ctx.original_query == {"key": "10"}

    def test_unvalidated_original_is_raw(self, make_context):
        """Without validation the original is the raw value."""
        ctx = make_context(params={"key": "3"})

        assert ctx.original_params == {"key": "3"}
        assert not ctx.is_validated(Container.PARAMS)

    def test_side_storage(self, make_context):
        """Only validated containers appear in side storage."""
        ctx = make_context(body={"key": "1"}, params={"id": "2"})
        ctx.replace(Container.BODY, {"key": 1})

        assert ctx.side_storage() == {"original_body": {"key": "1"}}

    def test_response_is_not_a_request_container(self, make_context):
        """The response container has no request-side state."""
        ctx = make_context()
        with pytest.raises(ValueError):
            ctx.value(Container.RESPONSE)


class TestRequestContextResponse:
    """Test cases for response state and rendering."""

    @pytest.mark.asyncio
    async def test_send_json_sets_body(self, make_context):
        """send_json stores the payload as a JSON body."""
        ctx = make_context()
        await ctx.send_json({"ok": True})

        response = ctx.to_response()

        assert response.status_code == 200
        assert response.media_type == "application/json"
        assert json.loads(response.body) == {"ok": True}

    @pytest.mark.asyncio
    async def test_send_json_string_payload(self, make_context):
        """A JSON string payload is still rendered as JSON."""
        ctx = make_context()
        await ctx.send_json("ok")

        assert json.loads(ctx.to_response().body) == "ok"

    @pytest.mark.asyncio
    async def test_intercept_json_restores_sender(self, make_context):
        """The wrapped sender is only active inside the block."""
        ctx = make_context()
        original_sender = ctx.json_sender
        seen = []

        def wrap(send):
            async def intercepted(payload):
                seen.append(payload)
                await send({"wrapped": payload})

            return intercepted

        async with ctx.intercept_json(wrap):
            await ctx.send_json(1)

        assert seen == [1]
        assert ctx.body == {"wrapped": 1}
        assert ctx.json_sender == original_sender

    @pytest.mark.asyncio
    async def test_intercept_json_restores_on_error(self, make_context):
        """The previous sender comes back even if the block raises."""
        ctx = make_context()
        original_sender = ctx.json_sender

        with pytest.raises(RuntimeError):
            async with ctx.intercept_json(lambda send: send):
                raise RuntimeError("boom")

        assert ctx.json_sender == original_sender

    def test_text_body(self, make_context):
        """String bodies render as plain text."""
        ctx = make_context()
        ctx.respond(400, "Error validating query. key is required.")

        response = ctx.to_response()

        assert response.status_code == 400
        assert response.body == b"Error validating query. key is required."
        assert response.media_type == "text/plain"

    def test_dict_body_without_media_type(self, make_context):
        """Mappings assigned directly render as JSON."""
        ctx = make_context()
        ctx.body = {"a": 1}
        ctx.status_code = 201

        response = ctx.to_response()

        assert response.status_code == 201
        assert json.loads(response.body) == {"a": 1}

    def test_no_body_is_not_found(self, make_context):
        """No status and no body means nothing handled the request."""
        assert make_context().to_response().status_code == 404

    def test_status_without_body(self, make_context):
        """A bare status is honoured."""
        ctx = make_context()
        ctx.status_code = 204
        assert ctx.to_response().status_code == 204

    def test_response_passthrough(self, make_context):
        """Response objects are returned as-is."""
        ctx = make_context()
        ctx.body = Response("raw", status_code=202)

        response = ctx.to_response()

        assert response is ctx.body
        assert response.status_code == 202


def test_multi_items_to_dict():
    """Repeated keys collect into lists in order."""
    items = [("a", "1"), ("b", "2"), ("a", "3"), ("a", "4")]
    assert multi_items_to_dict(items) == {"a": ["1", "3", "4"], "b": "2"}
