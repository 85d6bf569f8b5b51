"""
Validator factory.

``create_validator`` is called once when the application is wired; the
returned instance builds one pipeline step per route and container.
"""

from typing import Any, Mapping, Optional, Union

from route_validator.app.core.containers import Container
from route_validator.app.core.settings import get_settings
from route_validator.app.engine import ValidationEngine
from route_validator.app.middleware.validation.options import (
    FactoryConfig,
    ValidationOptions,
)
from route_validator.app.middleware.validation.pipeline import PipelineStep
from route_validator.app.middleware.validation.validators import (
    build_container_validator,
    build_response_validator,
)
from route_validator.app.utils.logging import get_logger

logger = get_logger(__name__)

OptionsArg = Union[ValidationOptions, Mapping[str, Any], None]


class ValidatorInstance:
    """
    Step builders bound to one ``FactoryConfig``.

    Holds no per-request state and can be shared by every route and every
    concurrent request of an application.
    """

    def __init__(self, config: FactoryConfig):
        self.config = config

    def for_container(
        self,
        kind: Union[Container, str],
        schema: Any,
        options: OptionsArg = None,
        **overrides: Any,
    ) -> PipelineStep:
        kind = Container(kind)
        resolved = ValidationOptions.coerce(options, **overrides)
        if kind is Container.RESPONSE:
            return build_response_validator(schema, resolved, config=self.config)
        return build_container_validator(kind, schema, resolved, config=self.config)

    def query(
        self, schema: Any, options: OptionsArg = None, **overrides: Any
    ) -> PipelineStep:
        return self.for_container(Container.QUERY, schema, options, **overrides)

    def body(
        self, schema: Any, options: OptionsArg = None, **overrides: Any
    ) -> PipelineStep:
        return self.for_container(Container.BODY, schema, options, **overrides)

    def headers(
        self, schema: Any, options: OptionsArg = None, **overrides: Any
    ) -> PipelineStep:
        return self.for_container(Container.HEADERS, schema, options, **overrides)

    def params(
        self, schema: Any, options: OptionsArg = None, **overrides: Any
    ) -> PipelineStep:
        return self.for_container(Container.PARAMS, schema, options, **overrides)

    def response(
        self, schema: Any, options: OptionsArg = None, **overrides: Any
    ) -> PipelineStep:
        return self.for_container(Container.RESPONSE, schema, options, **overrides)


def create_validator(
    config: Optional[FactoryConfig] = None,
    *,
    engine: Optional[ValidationEngine] = None,
    status_code: Optional[int] = None,
    propagate_error: Optional[bool] = None,
) -> ValidatorInstance:
    """
    Create a validator instance.

    Args:
        config: Base configuration; read from the environment when omitted
        engine: Validation engine, defaults to ``PydanticEngine``
        status_code: Default status code for failed validations
        propagate_error: Raise ``ContainerValidationError`` instead of responding

    Example:
        validator = create_validator(status_code=422)

        @validated_route(app, "/items", validator.query(ItemQuery))
        async def list_items(ctx):
            ...
    """
    if config is None:
        config = FactoryConfig.from_settings(get_settings())

    config = FactoryConfig(
        engine=engine or config.engine,
        status_code=status_code if status_code is not None else config.status_code,
        propagate_error=(
            propagate_error if propagate_error is not None else config.propagate_error
        ),
    )

    logger.info(
        "Validator instance created",
        extra={
            "engine": type(config.engine).__name__,
            "status_code": config.status_code,
            "propagate_error": config.propagate_error,
            "event_type": "validator_setup",
        },
    )

    return ValidatorInstance(config)
