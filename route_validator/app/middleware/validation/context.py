"""
Per-request context passed through a validation pipeline.

The context owns the raw and coerced value of every request container and
the outbound response state. Pipeline steps read and replace containers
through it instead of mutating the framework's request object.
"""

import json
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    Optional,
    Tuple,
    Union,
)

from fastapi import HTTPException, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, PlainTextResponse

from route_validator.app.core.containers import (
    REQUEST_CONTAINERS,
    Container,
    container_spec,
)

JsonSender = Callable[[Any], Awaitable[None]]

JSON_MEDIA_TYPE = "application/json"


@dataclass
class ContainerState:
    original: Any
    coerced: Any
    validated: bool = False


def multi_items_to_dict(items: Iterable[Tuple[str, Any]]) -> Dict[str, Any]:
    """Flatten multi-dict items; repeated keys become lists."""
    data: Dict[str, Any] = {}
    for key, value in items:
        if key not in data:
            data[key] = value
        elif isinstance(data[key], list):
            data[key].append(value)
        else:
            data[key] = [data[key], value]
    return data


async def read_body(request: Request) -> Any:
    """
    Parse the request body the way a body-parser middleware would.

    JSON and form encodings are decoded; an empty body becomes ``{}`` and
    any other content type is returned as text.
    """
    raw = await request.body()
    if not raw:
        return {}

    content_type = request.headers.get("content-type", "").lower()
    if "application/json" in content_type or content_type.endswith("+json"):
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise HTTPException(status_code=400, detail=f"Invalid JSON: {str(e)}")

    if content_type.startswith(
        ("application/x-www-form-urlencoded", "multipart/form-data")
    ):
        form = await request.form()
        return multi_items_to_dict(form.multi_items())

    return raw.decode("utf-8", errors="replace")


class RequestContext:
    """
    Request-scoped state shared by the pipeline steps of one route.

    Never shared across requests.
    """

    def __init__(
        self,
        request: Request,
        query: Optional[Dict[str, Any]] = None,
        body: Any = None,
        headers: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ):
        self.request = request
        self._containers: Dict[Container, ContainerState] = {
            Container.QUERY: ContainerState(query or {}, query or {}),
            Container.BODY: ContainerState(body, body),
            Container.HEADERS: ContainerState(headers or {}, headers or {}),
            Container.PARAMS: ContainerState(params or {}, params or {}),
        }

        self.status_code: Optional[int] = None
        self.body: Any = None
        self.media_type: Optional[str] = None
        self.json_sender: JsonSender = self._write_json

    @classmethod
    async def from_request(cls, request: Request) -> "RequestContext":
        body: Any = {}
        if request.method not in ("GET", "HEAD", "OPTIONS"):
            body = await read_body(request)
        return cls(
            request,
            query=multi_items_to_dict(request.query_params.multi_items()),
            body=body,
            headers=dict(request.headers),
            params=dict(request.path_params),
        )

    # === Request containers ===

    def _state(self, kind: Union[Container, str]) -> ContainerState:
        kind = Container(kind)
        if kind not in REQUEST_CONTAINERS:
            raise ValueError(f"'{kind}' is not a request container")
        return self._containers[kind]

    def value(self, kind: Union[Container, str]) -> Any:
        """Current value of a container as the next step will see it."""
        return self._state(kind).coerced

    def original(self, kind: Union[Container, str]) -> Any:
        return self._state(kind).original

    def is_validated(self, kind: Union[Container, str]) -> bool:
        return self._state(kind).validated

    def replace(self, kind: Union[Container, str], value: Any) -> None:
        """
        Store a coerced value for a container.

        The original is captured on the first replacement only, so stacking
        validators on one container keeps the value the client sent.
        """
        state = self._state(kind)
        if not state.validated:
            state.original = state.coerced
            state.validated = True
        state.coerced = value

    def side_storage(self) -> Dict[str, Any]:
        """Original values keyed by each validated container's side key."""
        return {
            container_spec(kind).side_storage_key: state.original
            for kind, state in self._containers.items()
            if state.validated
        }

    @property
    def query(self) -> Any:
        return self.value(Container.QUERY)

    @property
    def headers(self) -> Any:
        return self.value(Container.HEADERS)

    @property
    def params(self) -> Any:
        return self.value(Container.PARAMS)

    @property
    def request_body(self) -> Any:
        return self.value(Container.BODY)

    @property
    def original_query(self) -> Any:
        return self.original(Container.QUERY)

    @property
    def original_body(self) -> Any:
        return self.original(Container.BODY)

    @property
    def original_headers(self) -> Any:
        return self.original(Container.HEADERS)

    @property
    def original_params(self) -> Any:
        return self.original(Container.PARAMS)

    # === Response ===

    async def _write_json(self, payload: Any) -> None:
        self.body = payload
        self.media_type = JSON_MEDIA_TYPE

    async def send_json(self, payload: Any) -> None:
        await self.json_sender(payload)

    @asynccontextmanager
    async def intercept_json(
        self, wrap: Callable[[JsonSender], JsonSender]
    ) -> AsyncIterator[None]:
        """Route ``send_json`` through ``wrap(previous)`` for the block."""
        previous = self.json_sender
        self.json_sender = wrap(previous)
        try:
            yield
        finally:
            self.json_sender = previous

    def respond(self, status_code: int, body: Any) -> None:
        self.status_code = status_code
        self.body = body
        self.media_type = None

    def to_response(self) -> Response:
        if isinstance(self.body, Response):
            if self.status_code is not None:
                self.body.status_code = self.status_code
            return self.body

        if self.body is None:
            if self.status_code is None:
                return PlainTextResponse("Not Found", status_code=404)
            return Response(status_code=self.status_code)

        status_code = self.status_code or 200
        if self.media_type == JSON_MEDIA_TYPE or not isinstance(
            self.body, (str, bytes)
        ):
            return JSONResponse(
                content=jsonable_encoder(self.body), status_code=status_code
            )
        if isinstance(self.body, bytes):
            return Response(
                content=self.body,
                status_code=status_code,
                media_type=self.media_type or "application/octet-stream",
            )
        return PlainTextResponse(self.body, status_code=status_code)
