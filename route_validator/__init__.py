"""
Route Validator
===============
Per-route validation of query strings, bodies, headers, URL parameters and
JSON responses for FastAPI / Starlette applications.
"""

from route_validator.app.core.containers import (
    Container,
    ContainerSpec,
    EngineOptions,
    container_spec,
)
from route_validator.app.core.exceptions import ContainerValidationError
from route_validator.app.engine import (
    EngineValidationError,
    ErrorDetail,
    PydanticEngine,
    ValidationEngine,
    ValidationResult,
)
from route_validator.app.middleware.error import setup_validation_error_handling
from route_validator.app.middleware.validation import (
    FactoryConfig,
    RequestContext,
    ValidationOptions,
    ValidatorInstance,
    build_endpoint,
    compose,
    create_validator,
    format_error_message,
    validated_route,
)

__all__ = [
    "Container",
    "ContainerSpec",
    "ContainerValidationError",
    "EngineOptions",
    "EngineValidationError",
    "ErrorDetail",
    "FactoryConfig",
    "PydanticEngine",
    "RequestContext",
    "ValidationEngine",
    "ValidationOptions",
    "ValidationResult",
    "ValidatorInstance",
    "build_endpoint",
    "compose",
    "container_spec",
    "create_validator",
    "format_error_message",
    "setup_validation_error_handling",
    "validated_route",
]
