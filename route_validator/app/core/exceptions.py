"""
Exceptions raised by the validation middleware.
"""

from typing import Any, Dict, List

from route_validator.app.core.containers import Container
from route_validator.app.engine.base import EngineValidationError


class ContainerValidationError(Exception):
    """
    Raised in propagate mode when a container fails validation.

    Carries the container kind and the engine's raw error so an upstream
    error handler can render it as it sees fit.
    """

    def __init__(
        self,
        kind: Container,
        error: EngineValidationError,
        message: str,
        status_code: int = 400,
    ):
        super().__init__(message)
        self.kind = Container(kind)
        self.error = error
        self.message = message
        self.status_code = status_code

    @property
    def details(self):
        return self.error.details

    def errors(self) -> List[Dict[str, Any]]:
        """Details as plain dicts, in engine order."""
        return [
            {
                "field": ".".join(str(part) for part in detail.path),
                "message": detail.message,
                "type": detail.type,
            }
            for detail in self.error.details
        ]

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(kind={self.kind.value!r}, "
            f"status_code={self.status_code}, message={self.message!r})"
        )
