"""
Schema validation for node and flow configuration.

Schemas are a closed set of variants (string, number, boolean, object,
array, any) walked by a recursive visitor. ``validate`` is pure: the same
``(value, schema)`` pair always yields an equal :class:`ValidationResult`, and
defaults are advisory metadata that are never injected into the value.

Manifesto:
    - **Tagged union:** One dataclass per schema type; the visitor dispatches
      on the class, so adding a type means adding a handler
    - **Accumulate, don't short-circuit:** Every independent constraint
      reports, except the required check which stops at an absent value
    - **Data form accepted:** JSON-like dicts (``{"type": "string",
      "minLength": 2}``) are converted with :func:`schema_from_dict`

Architecture:
    ::

        validate(value, schema, path)
            │
            ├── required & absent ──────────► "<p> is required"
            ├── optional & absent ──────────► valid
            ├── type mismatch ──────────────► "<p> must be of type T, got A"
            ├── _visit(schema, value, path)   (singledispatch on variant)
            │      String  → minLength / maxLength / pattern
            │      Number  → NaN / minimum / maximum
            │      Object  → required properties, then properties[*]
            │      Array   → minLength / maxLength, then items[i]
            └── enum ───────────────────────► "<p> must be one of: a, b"

Examples:
    >>> schema = schema_from_dict({
    ...     "type": "object",
    ...     "required": ["a"],
    ...     "properties": {"a": {"type": "string"}},
    ... })
    >>> validate({}, schema).errors
    ['a is required']
    >>> validate({"a": 5}, schema).errors
    ['a must be of type string, got number']

Tags:
    validation, schema, configuration, tagged-union, hami

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import singledispatch
from typing import Any, ClassVar

from hami.core.errors import SchemaError


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation: ``valid`` is true exactly when ``errors`` is empty."""

    valid: bool
    errors: list[str] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: list[str]) -> ValidationResult:
        return cls(valid=not errors, errors=list(errors))

    def __bool__(self) -> bool:
        return self.valid


# =============================================================================
# SCHEMA VARIANTS
# =============================================================================


@dataclass
class Schema:
    """Fields shared by every schema variant."""

    type_name: ClassVar[str] = ""

    required: bool = False
    default: Any = None
    enum: list[Any] | None = None
    description: str | None = None


@dataclass
class StringSchema(Schema):
    type_name: ClassVar[str] = "string"

    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None


@dataclass
class NumberSchema(Schema):
    type_name: ClassVar[str] = "number"

    minimum: float | None = None
    maximum: float | None = None


@dataclass
class BooleanSchema(Schema):
    type_name: ClassVar[str] = "boolean"


@dataclass
class ObjectSchema(Schema):
    """Object schema; ``required_properties`` lists keys that must be present."""

    type_name: ClassVar[str] = "object"

    required_properties: list[str] = field(default_factory=list)
    properties: dict[str, Schema] = field(default_factory=dict)


@dataclass
class ArraySchema(Schema):
    type_name: ClassVar[str] = "array"

    min_length: int | None = None
    max_length: int | None = None
    items: Schema | None = None


@dataclass
class AnySchema(Schema):
    type_name: ClassVar[str] = "any"


SCHEMA_TYPES: dict[str, type[Schema]] = {
    cls.type_name: cls
    for cls in (StringSchema, NumberSchema, BooleanSchema, ObjectSchema, ArraySchema, AnySchema)
}

# camelCase keys of the data form -> dataclass field names
_FIELD_ALIASES = {
    "minLength": "min_length",
    "maxLength": "max_length",
}


def schema_from_dict(data: Mapping[str, Any] | Schema) -> Schema:
    """Convert the JSON-like data form of a schema into its typed variant.

    Raises:
        SchemaError: unknown ``type`` or a key the variant does not support.
    """
    if isinstance(data, Schema):
        return data
    if not isinstance(data, Mapping):
        raise SchemaError(f"Schema must be a mapping, got {type(data).__name__}")

    type_name = data.get("type")
    schema_cls = SCHEMA_TYPES.get(type_name)  # type: ignore[arg-type]
    if schema_cls is None:
        raise SchemaError(
            f"Unknown schema type: {type_name!r}. "
            f"Available: {', '.join(SCHEMA_TYPES)}"
        )

    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key == "type":
            continue
        name = _FIELD_ALIASES.get(key, key)
        if key == "required" and schema_cls is ObjectSchema and not isinstance(value, bool):
            kwargs["required_properties"] = list(value)
            continue
        if key == "properties":
            value = {prop: schema_from_dict(sub) for prop, sub in value.items()}
        elif key == "items":
            value = schema_from_dict(value)
        if name not in schema_cls.__dataclass_fields__:
            raise SchemaError(f"Schema of type {type_name} does not support {key!r}")
        kwargs[name] = value
    return schema_cls(**kwargs)


# =============================================================================
# VALIDATION
# =============================================================================


def type_name_of(value: Any) -> str:
    """Name of ``value``'s runtime type in schema vocabulary."""
    # bool before number: bool is an int subclass
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _label(path: str) -> str:
    return path or "value"


def validate(value: Any, schema: Schema | Mapping[str, Any], path: str = "") -> ValidationResult:
    """Validate ``value`` against ``schema``.

    Args:
        value: The value to check. ``None`` means absent.
        schema: A :class:`Schema` variant or its data form.
        path: Location of ``value`` inside the enclosing config, used in messages.
    """
    schema = schema_from_dict(schema)
    return ValidationResult.from_errors(_validate(value, schema, path))


def _is_enum_member(value: Any, options: list[Any]) -> bool:
    # True must not match 1, nor 1 match True
    actual = type_name_of(value)
    return any(type_name_of(option) == actual and option == value for option in options)


def _validate(value: Any, schema: Schema, path: str) -> list[str]:
    # object presence is enforced by the parent's required_properties
    if (
        schema.type_name != "object"
        and schema.required is True
        and (value is None or value == "")
    ):
        return [f"{_label(path)} is required"]
    if value is None:
        return []

    errors: list[str] = []
    actual = type_name_of(value)
    if schema.type_name != "any" and actual != schema.type_name:
        errors.append(f"{_label(path)} must be of type {schema.type_name}, got {actual}")
        return errors

    errors.extend(_visit(schema, value, path))

    if schema.enum is not None and not _is_enum_member(value, schema.enum):
        allowed = ", ".join(str(option) for option in schema.enum)
        errors.append(f"{_label(path)} must be one of: {allowed}")
    return errors


@singledispatch
def _visit(schema: Schema, value: Any, path: str) -> list[str]:
    raise SchemaError(f"No validator for schema variant {type(schema).__name__}")


@_visit.register
def _(schema: StringSchema, value: str, path: str) -> list[str]:
    errors = []
    if schema.min_length is not None and len(value) < schema.min_length:
        errors.append(f"{_label(path)} must be at least {schema.min_length} characters long")
    if schema.max_length is not None and len(value) > schema.max_length:
        errors.append(f"{_label(path)} must be at most {schema.max_length} characters long")
    if schema.pattern:
        try:
            matched = re.search(schema.pattern, value) is not None
        except re.error:
            matched = True  # unusable pattern: constraint skipped
        if not matched:
            errors.append(f"{_label(path)} must match pattern: {schema.pattern}")
    return errors


@_visit.register
def _(schema: NumberSchema, value: float, path: str) -> list[str]:
    if math.isnan(value):
        return [f"{_label(path)} must be a valid number"]
    errors = []
    if schema.minimum is not None and value < schema.minimum:
        errors.append(f"{_label(path)} must be at least {schema.minimum}")
    if schema.maximum is not None and value > schema.maximum:
        errors.append(f"{_label(path)} must be at most {schema.maximum}")
    return errors


@_visit.register
def _(schema: BooleanSchema, value: bool, path: str) -> list[str]:
    return []


@_visit.register
def _(schema: AnySchema, value: Any, path: str) -> list[str]:
    return []


def _child_path(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


@_visit.register
def _(schema: ObjectSchema, value: Mapping, path: str) -> list[str]:
    errors = []
    missing = set()
    for prop in schema.required_properties:
        if prop not in value:
            missing.add(prop)
            errors.append(f"{_child_path(path, prop)} is required")
    for key, prop_schema in schema.properties.items():
        if key in missing:
            continue
        errors.extend(_validate(value.get(key), prop_schema, _child_path(path, key)))
    return errors


@_visit.register
def _(schema: ArraySchema, value: list, path: str) -> list[str]:
    errors = []
    if schema.min_length is not None and len(value) < schema.min_length:
        errors.append(f"{_label(path)} must have at least {schema.min_length} items")
    if schema.max_length is not None and len(value) > schema.max_length:
        errors.append(f"{_label(path)} must have at most {schema.max_length} items")
    if schema.items is not None:
        for index, item in enumerate(value):
            errors.extend(_validate(item, schema.items, f"{path}[{index}]"))
    return errors


__all__ = [
    "ValidationResult",
    "Schema",
    "StringSchema",
    "NumberSchema",
    "BooleanSchema",
    "ObjectSchema",
    "ArraySchema",
    "AnySchema",
    "SCHEMA_TYPES",
    "schema_from_dict",
    "type_name_of",
    "validate",
]
