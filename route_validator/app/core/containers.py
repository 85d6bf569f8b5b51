"""
Data containers subject to validation and their default engine options.
"""

from dataclasses import dataclass, fields
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class Container(str, Enum):
    """Classes of request/response data a pipeline step can validate"""

    QUERY = "query"
    BODY = "body"
    HEADERS = "headers"
    # URL params e.g "/users/{user_id}"
    PARAMS = "params"
    RESPONSE = "response"

    def __str__(self) -> str:
        return self.value


REQUEST_CONTAINERS = (
    Container.QUERY,
    Container.BODY,
    Container.HEADERS,
    Container.PARAMS,
)


# camelCase spellings accepted by EngineOptions.from_mapping
_OPTION_ALIASES = {
    "allowUnknown": "allow_unknown",
    "stripUnknown": "strip_unknown",
    "abortEarly": "abort_early",
}


@dataclass(frozen=True)
class EngineOptions:
    """Options forwarded verbatim to the validation engine"""

    convert: bool = True
    allow_unknown: bool = False
    strip_unknown: bool = False
    abort_early: bool = True

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "EngineOptions":
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in options.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown engine option: {key}")
            values[name] = bool(value)
        return cls(**values)


@dataclass(frozen=True)
class ContainerSpec:
    kind: Container
    side_storage_key: str
    default_options: EngineOptions


_CONTAINER_SPECS: Mapping[Container, ContainerSpec] = MappingProxyType(
    {
        Container.QUERY: ContainerSpec(
            kind=Container.QUERY,
            side_storage_key="original_query",
            default_options=EngineOptions(
                convert=True, allow_unknown=False, abort_early=False
            ),
        ),
        Container.BODY: ContainerSpec(
            kind=Container.BODY,
            side_storage_key="original_body",
            default_options=EngineOptions(
                convert=True, allow_unknown=False, abort_early=False
            ),
        ),
        # Headers carry routing and infrastructure values the schema does not
        # describe, so unknown keys are tolerated and kept.
        Container.HEADERS: ContainerSpec(
            kind=Container.HEADERS,
            side_storage_key="original_headers",
            default_options=EngineOptions(
                convert=True,
                allow_unknown=True,
                strip_unknown=False,
                abort_early=False,
            ),
        ),
        Container.PARAMS: ContainerSpec(
            kind=Container.PARAMS,
            side_storage_key="original_params",
            default_options=EngineOptions(
                convert=True, allow_unknown=False, abort_early=False
            ),
        ),
    }
)


def container_spec(kind: Container) -> ContainerSpec:
    """Look up the static descriptor for a request-side container."""
    kind = Container(kind)
    try:
        return _CONTAINER_SPECS[kind]
    except KeyError:
        raise ValueError(f"No container spec for '{kind}'") from None
