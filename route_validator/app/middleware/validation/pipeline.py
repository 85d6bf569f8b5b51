"""
Composition of validation steps into Starlette/FastAPI endpoints.

A pipeline step is ``async def step(ctx, call_next)``: it may run code before
and after awaiting ``call_next()``, or return without awaiting it to end the
request early.
"""

import inspect
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from fastapi import Request, Response

from route_validator.app.middleware.validation.context import RequestContext
from route_validator.app.utils.logging import get_logger

logger = get_logger(__name__)

NextStep = Callable[[], Awaitable[None]]
PipelineStep = Callable[[RequestContext, NextStep], Awaitable[None]]
Handler = Callable[[RequestContext], Any]


def compose(
    steps: Sequence[PipelineStep],
) -> Callable[[RequestContext, Optional[NextStep]], Awaitable[None]]:
    """
    Chain steps so each one's ``call_next`` runs the rest of the chain.

    Raises:
        RuntimeError: if a step awaits ``call_next`` more than once
    """
    chain = list(steps)

    async def run(ctx: RequestContext, final: Optional[NextStep] = None) -> None:
        index = -1

        async def dispatch(i: int) -> None:
            nonlocal index
            if i <= index:
                raise RuntimeError("call_next() called multiple times")
            index = i

            if i == len(chain):
                if final is not None:
                    await final()
                return

            await chain[i](ctx, lambda: dispatch(i + 1))

        await dispatch(0)

    return run


def handler_step(handler: Handler) -> PipelineStep:
    """Adapt a route handler to the last step of a pipeline."""

    async def step(ctx: RequestContext, call_next: NextStep) -> None:
        result = handler(ctx)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, Response):
            ctx.body = result
        elif result is not None:
            await ctx.send_json(result)
        await call_next()

    return step


def build_endpoint(
    *steps: PipelineStep, handler: Handler
) -> Callable[[Request], Awaitable[Response]]:
    """
    Build a Starlette endpoint running ``steps`` then ``handler``.

    The handler receives the ``RequestContext``; a returned ``Response`` is
    used as is, any other non-``None`` value is sent as JSON through
    ``ctx.send_json`` so response validators see it.
    """
    run = compose([*steps, handler_step(handler)])

    async def endpoint(request: Request) -> Response:
        ctx = await RequestContext.from_request(request)
        await run(ctx)
        return ctx.to_response()

    endpoint.__name__ = getattr(handler, "__name__", "endpoint")
    endpoint.__doc__ = getattr(handler, "__doc__", None)
    return endpoint


def validated_route(
    router: Any,
    path: str,
    *steps: PipelineStep,
    methods: Optional[List[str]] = None,
    name: Optional[str] = None,
) -> Callable[[Handler], Handler]:
    """
    Register ``handler`` on ``router`` behind the given pipeline steps.

    ``router`` is anything exposing Starlette's ``add_route``: a FastAPI or
    Starlette application or an ``APIRouter``.

    Example:
        @validated_route(app, "/users/{user_id}", validator.params(UserParams))
        async def get_user(ctx):
            return {"id": ctx.params["user_id"]}
    """

    def decorator(handler: Handler) -> Handler:
        endpoint = build_endpoint(*steps, handler=handler)
        router.add_route(
            path,
            endpoint,
            methods=methods or ["GET"],
            name=name or handler.__name__,
        )
        logger.debug(
            "Validated route registered",
            extra={
                "path": path,
                "methods": methods or ["GET"],
                "steps": len(steps),
                "event_type": "route_registered",
            },
        )
        return handler

    return decorator
