"""
Factory-wide and per-call configuration of validation steps.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from route_validator.app.core.containers import EngineOptions
from route_validator.app.core.settings import ValidatorSettings
from route_validator.app.engine import PydanticEngine, ValidationEngine

DEFAULT_STATUS_CODE = 400

# camelCase spellings accepted in mapping options
_OPTION_ALIASES = {
    "engineOptions": "engine_options",
    "statusCode": "status_code",
    "propagateError": "propagate_error",
}


@dataclass(frozen=True)
class ValidationOptions:
    """
    Per-call overrides for one pipeline step.

    ``None`` means "inherit": engine options fall back to the container
    defaults, status code and propagate flag fall back to the factory.
    """

    engine_options: Union[EngineOptions, Mapping[str, Any], None] = None
    status_code: Optional[int] = None
    propagate_error: Optional[bool] = None

    def __post_init__(self):
        if isinstance(self.engine_options, Mapping):
            object.__setattr__(
                self, "engine_options", EngineOptions.from_mapping(self.engine_options)
            )

    @classmethod
    def coerce(
        cls,
        options: Union["ValidationOptions", Mapping[str, Any], None] = None,
        **overrides: Any,
    ) -> "ValidationOptions":
        """Accept a ``ValidationOptions``, a mapping, or keyword arguments."""
        if options is None:
            values = {}
        elif isinstance(options, ValidationOptions):
            values = {
                "engine_options": options.engine_options,
                "status_code": options.status_code,
                "propagate_error": options.propagate_error,
            }
        elif isinstance(options, Mapping):
            values = {_OPTION_ALIASES.get(k, k): v for k, v in options.items()}
        else:
            raise TypeError(
                f"options must be ValidationOptions or a mapping, got {type(options).__name__}"
            )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass(frozen=True)
class FactoryConfig:
    """Process-wide configuration bound into a validator instance."""

    engine: ValidationEngine = field(default_factory=PydanticEngine)
    status_code: int = DEFAULT_STATUS_CODE
    propagate_error: bool = False

    @classmethod
    def from_settings(
        cls, settings: ValidatorSettings, engine: Optional[ValidationEngine] = None
    ) -> "FactoryConfig":
        return cls(
            engine=engine or PydanticEngine(),
            status_code=settings.DEFAULT_STATUS_CODE,
            propagate_error=settings.PROPAGATE_ERROR,
        )

    def resolve_status_code(self, options: ValidationOptions) -> int:
        return options.status_code or self.status_code or DEFAULT_STATUS_CODE

    def resolve_propagate(self, options: ValidationOptions) -> bool:
        if options.propagate_error is not None:
            return options.propagate_error
        return self.propagate_error
