"""
Pipeline step builders for request containers and JSON responses.
"""

from typing import Any

from route_validator.app.core.containers import (
    REQUEST_CONTAINERS,
    Container,
    EngineOptions,
    container_spec,
)
from route_validator.app.core.exceptions import ContainerValidationError
from route_validator.app.engine import EngineValidationError
from route_validator.app.middleware.validation.context import (
    JsonSender,
    RequestContext,
)
from route_validator.app.middleware.validation.options import (
    FactoryConfig,
    ValidationOptions,
)
from route_validator.app.middleware.validation.pipeline import NextStep, PipelineStep
from route_validator.app.utils.logging import get_logger

logger = get_logger(__name__)


def format_error_message(error: EngineValidationError, kind: Container) -> str:
    """
    Build the response body for a failed validation.

    Messages are kept in the order the engine reported them.
    """
    message = f"Error validating {Container(kind).value}."
    for detail in error.details:
        message += f" {detail.message}."
    return message


def _fail(
    ctx: RequestContext,
    kind: Container,
    error: EngineValidationError,
    options: ValidationOptions,
    config: FactoryConfig,
) -> None:
    """Apply the respond-or-raise policy to a validation failure."""
    status_code = config.resolve_status_code(options)
    message = format_error_message(error, kind)
    propagate = config.resolve_propagate(options)

    logger.warning(
        f"Validation of {kind.value} failed",
        extra={
            "container": kind.value,
            "path": ctx.request.url.path,
            "method": ctx.request.method,
            "status_code": status_code,
            "error_count": len(error.details),
            "propagate": propagate,
            "event_type": "validation_failed",
        },
    )

    if propagate:
        error.kind = kind
        raise ContainerValidationError(kind, error, message, status_code=status_code)

    ctx.respond(status_code, message)


def build_container_validator(
    kind: Container,
    schema: Any,
    options: ValidationOptions,
    *,
    config: FactoryConfig,
) -> PipelineStep:
    """
    Build a step validating one request container.

    On success the container is replaced with the coerced value (the raw
    value stays available as the container's original) and the pipeline
    continues. On failure the step either raises ``ContainerValidationError``
    or writes the error response and stops the pipeline.
    """
    kind = Container(kind)
    if kind not in REQUEST_CONTAINERS:
        raise ValueError(f"'{kind.value}' is not a request container")

    spec = container_spec(kind)
    engine_options = options.engine_options or spec.default_options

    async def validate_container(ctx: RequestContext, call_next: NextStep) -> None:
        result = config.engine.validate(ctx.value(kind), schema, engine_options)

        if result.error is not None:
            _fail(ctx, kind, result.error, options, config)
            return

        ctx.replace(kind, result.value)
        logger.debug(
            f"Validation of {kind.value} succeeded",
            extra={
                "container": kind.value,
                "side_storage_key": spec.side_storage_key,
                "event_type": "validation_success",
            },
        )
        await call_next()

    validate_container.__name__ = f"validate_{kind.value}"
    return validate_container


def build_response_validator(
    schema: Any,
    options: ValidationOptions,
    *,
    config: FactoryConfig,
) -> PipelineStep:
    """
    Build a step validating JSON sent by downstream code.

    Nothing is validated if the downstream pipeline never sends JSON.
    """
    engine_options = options.engine_options or EngineOptions()

    async def validate_response(ctx: RequestContext, call_next: NextStep) -> None:
        def wrap(send: JsonSender) -> JsonSender:
            async def send_validated(payload: Any) -> None:
                result = config.engine.validate(payload, schema, engine_options)
                if result.error is not None:
                    _fail(ctx, Container.RESPONSE, result.error, options, config)
                    return
                await send(result.value)

            return send_validated

        async with ctx.intercept_json(wrap):
            await call_next()

    return validate_response
