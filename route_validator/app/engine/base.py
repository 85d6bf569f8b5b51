"""
Validation engine contract.

An engine exposes one synchronous call, ``validate(data, schema, options)``,
returning the coerced value or an error carrying ordered detail entries.
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence, Tuple, Union, runtime_checkable

from route_validator.app.core.containers import Container, EngineOptions

PathPart = Union[str, int]


@dataclass(frozen=True)
class ErrorDetail:
    message: str
    path: Tuple[PathPart, ...] = ()
    type: str = "invalid"


class EngineValidationError(Exception):
    """Data did not conform to the schema."""

    def __init__(self, details: Sequence[ErrorDetail]):
        self.details: Tuple[ErrorDetail, ...] = tuple(details)
        # Set by the middleware before propagating
        self.kind: Optional[Container] = None
        super().__init__("; ".join(detail.message for detail in self.details))


@dataclass(frozen=True)
class ValidationResult:
    value: Any = None
    error: Optional[EngineValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@runtime_checkable
class ValidationEngine(Protocol):
    def validate(
        self, data: Any, schema: Any, options: EngineOptions
    ) -> ValidationResult: ...
