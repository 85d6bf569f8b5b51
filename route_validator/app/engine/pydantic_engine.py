"""
Default validation engine backed by pydantic.

Schemas are ``BaseModel`` subclasses or any type ``pydantic.TypeAdapter``
accepts. Error messages are rendered as ``"<label> <phrase>"`` so that the
formatted response body reads naturally, e.g. ``key must be a number``.
"""

import collections.abc
from functools import lru_cache
from types import UnionType
from typing import (
    Annotated,
    Any,
    Dict,
    Iterable,
    List,
    Mapping,
    NamedTuple,
    Tuple,
    Union,
    get_args,
    get_origin,
)

from pydantic import AliasChoices, AliasPath, BaseModel, TypeAdapter, ValidationError

from route_validator.app.core.containers import EngineOptions
from route_validator.app.engine.base import (
    EngineValidationError,
    ErrorDetail,
    PathPart,
    ValidationResult,
)

_NUMBER_ERRORS = {
    "int_parsing",
    "int_parsing_size",
    "int_type",
    "float_parsing",
    "float_type",
    "decimal_parsing",
    "decimal_type",
    "finite_number",
}

# pydantic error type -> phrase template filled from the error ctx
_PHRASES: Dict[str, str] = {
    "missing": "is required",
    "int_from_float": "must be an integer",
    "string_type": "must be a string",
    "string_unicode": "must be a string",
    "bool_parsing": "must be a boolean",
    "bool_type": "must be a boolean",
    "less_than_equal": "must be less than or equal to {le}",
    "greater_than_equal": "must be greater than or equal to {ge}",
    "less_than": "must be less than {lt}",
    "greater_than": "must be greater than {gt}",
    "multiple_of": "must be a multiple of {multiple_of}",
    "string_too_short": "length must be at least {min_length} characters long",
    "string_too_long": "length must be less than or equal to {max_length} characters long",
    "too_short": "must contain at least {min_length} items",
    "too_long": "must contain less than or equal to {max_length} items",
    "literal_error": "must be one of [{expected}]",
    "enum": "must be one of [{expected}]",
    "string_pattern_mismatch": "fails to match the required pattern: {pattern}",
    "dict_type": "must be an object",
    "model_type": "must be an object",
    "model_attributes_type": "must be an object",
    "list_type": "must be an array",
    "tuple_type": "must be an array",
    "set_type": "must be an array",
    "extra_forbidden": "is not allowed",
    "date_parsing": "must be a valid date",
    "date_type": "must be a valid date",
    "date_from_datetime_parsing": "must be a valid date",
    "datetime_parsing": "must be a valid date",
    "datetime_type": "must be a valid date",
    "datetime_from_date_parsing": "must be a valid date",
    "uuid_parsing": "must be a valid GUID",
    "uuid_type": "must be a valid GUID",
    "url_parsing": "must be a valid uri",
    "url_type": "must be a valid uri",
}


def error_label(path: Iterable[PathPart]) -> str:
    """Dotted location of an error; list indexes render as ``[n]``."""
    label = ""
    for part in path:
        if isinstance(part, int):
            label += f"[{part}]"
        elif label:
            label += f".{part}"
        else:
            label = str(part)
    return label or "value"


def render_message(error: Mapping[str, Any]) -> str:
    """Render one pydantic error entry as a readable sentence."""
    label = error_label(error.get("loc", ()))
    error_type = error.get("type", "")

    if error_type in _NUMBER_ERRORS:
        return f"{label} must be a number"

    template = _PHRASES.get(error_type)
    if template is not None:
        try:
            return f"{label} {template.format(**error.get('ctx', {}))}"
        except (KeyError, IndexError):
            pass

    return f"{label}: {error.get('msg', 'is invalid')}"


@lru_cache(maxsize=256)
def _adapter(schema: Any) -> TypeAdapter:
    return TypeAdapter(schema)


def _is_model(schema: Any) -> bool:
    return isinstance(schema, type) and issubclass(schema, BaseModel)


class UnknownKey(NamedTuple):
    """A key with no matching field, located in the input and in the output."""

    path: Tuple[PathPart, ...]
    output_path: Tuple[PathPart, ...]
    value: Any


# input key -> (output key, field annotation); annotation None means the value
# is not descended into
FieldLookup = Dict[str, Tuple[str, Any]]


@lru_cache(maxsize=256)
def _field_lookup(model: type) -> FieldLookup:
    by_name = bool(
        model.model_config.get("populate_by_name")
        or model.model_config.get("validate_by_name")
    )
    lookup: FieldLookup = {}
    for name, field in model.model_fields.items():
        output_key = field.serialization_alias or field.alias or name
        alias = field.validation_alias or field.alias
        if alias is None or by_name:
            lookup[name] = (output_key, field.annotation)
        choices = alias.choices if isinstance(alias, AliasChoices) else [alias]
        for choice in choices:
            if isinstance(choice, str):
                lookup[choice] = (output_key, field.annotation)
            elif isinstance(choice, AliasPath) and choice.path:
                lookup.setdefault(str(choice.path[0]), (output_key, None))
    return lookup


def _unwrap(annotation: Any) -> Any:
    """Strip ``Annotated`` and ``Optional`` down to the inner type."""
    origin = get_origin(annotation)
    if origin is Annotated:
        return _unwrap(get_args(annotation)[0])
    if origin is Union or origin is UnionType:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return _unwrap(args[0])
    return annotation


def _collect_unknown(
    data: Any,
    annotation: Any,
    path: Tuple[PathPart, ...],
    output_path: Tuple[PathPart, ...],
    found: List[UnknownKey],
) -> Any:
    """
    Return ``data`` without keys unknown to the models in ``annotation``.

    Every removed key is appended to ``found``. Models that set ``extra``
    themselves are left to pydantic.
    """
    annotation = _unwrap(annotation)

    if _is_model(annotation) and isinstance(data, Mapping):
        if annotation.model_config.get("extra") in ("allow", "forbid"):
            return data
        lookup = _field_lookup(annotation)
        cleaned: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in lookup:
                found.append(UnknownKey(path + (key,), output_path + (key,), value))
                continue
            output_key, field_annotation = lookup[key]
            if field_annotation is None:
                cleaned[key] = value
            else:
                cleaned[key] = _collect_unknown(
                    value,
                    field_annotation,
                    path + (key,),
                    output_path + (output_key,),
                    found,
                )
        return cleaned

    origin = get_origin(annotation)
    args = get_args(annotation)
    if not args:
        return data

    is_sequence = origin in (list, tuple, collections.abc.Sequence)
    if is_sequence and isinstance(data, (list, tuple)):
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            item_types = list(args)
        else:
            item_types = [args[0]] * len(data)
        if len(item_types) != len(data):
            return data
        items = [
            _collect_unknown(item, item_type, path + (i,), output_path + (i,), found)
            for i, (item, item_type) in enumerate(zip(data, item_types))
        ]
        return tuple(items) if isinstance(data, tuple) else items

    is_mapping = origin in (dict, collections.abc.Mapping)
    if is_mapping and isinstance(data, Mapping) and len(args) == 2:
        return {
            key: _collect_unknown(
                value, args[1], path + (key,), output_path + (key,), found
            )
            for key, value in data.items()
        }

    return data


def _restore_unknown(value: Any, found: Iterable[UnknownKey]) -> Any:
    for unknown in found:
        parent = value
        try:
            for part in unknown.output_path[:-1]:
                parent = parent[part]
        except (KeyError, IndexError, TypeError):
            continue
        if isinstance(parent, dict):
            parent.setdefault(unknown.output_path[-1], unknown.value)
    return value


class PydanticEngine:
    """
    Synchronous validation engine over pydantic ``TypeAdapter``.

    The unknown-key policy applies to every model in the schema, nested ones
    included: ``strip_unknown`` drops such keys, otherwise ``allow_unknown``
    keeps them and anything else reports ``<path> is not allowed``.
    """

    def validate(
        self, data: Any, schema: Any, options: EngineOptions
    ) -> ValidationResult:
        unknown: List[UnknownKey] = []
        candidate = _collect_unknown(data, schema, (), (), unknown)

        adapter = _adapter(schema)
        details: List[ErrorDetail] = []
        validated = None
        try:
            validated = adapter.validate_python(
                candidate, strict=None if options.convert else True
            )
        except ValidationError as exc:
            details.extend(
                ErrorDetail(
                    message=render_message(error),
                    path=tuple(error["loc"]),
                    type=error["type"],
                )
                for error in exc.errors()
            )

        if unknown and not options.strip_unknown and not options.allow_unknown:
            details.extend(
                ErrorDetail(
                    message=f"{error_label(key.path)} is not allowed",
                    path=key.path,
                    type="extra_forbidden",
                )
                for key in unknown
            )

        if details:
            if options.abort_early:
                details = details[:1]
            return ValidationResult(value=data, error=EngineValidationError(details))

        value = adapter.dump_python(validated, by_alias=True)
        if unknown and not options.strip_unknown:
            value = _restore_unknown(value, unknown)
        return ValidationResult(value=value)
