"""
Validation middleware for Route Validator.
"""

from .context import RequestContext
from .factory import ValidatorInstance, create_validator
from .options import FactoryConfig, ValidationOptions
from .pipeline import build_endpoint, compose, validated_route
from .validators import (
    build_container_validator,
    build_response_validator,
    format_error_message,
)

__all__ = [
    "FactoryConfig",
    "RequestContext",
    "ValidationOptions",
    "ValidatorInstance",
    "build_container_validator",
    "build_endpoint",
    "build_response_validator",
    "compose",
    "create_validator",
    "format_error_message",
    "validated_route",
]
