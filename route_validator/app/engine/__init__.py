"""
Validation engines for Route Validator.
"""

from .base import EngineValidationError, ErrorDetail, ValidationEngine, ValidationResult
from .pydantic_engine import PydanticEngine

__all__ = [
    "EngineValidationError",
    "ErrorDetail",
    "PydanticEngine",
    "ValidationEngine",
    "ValidationResult",
]
