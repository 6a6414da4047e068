"""Schema capability interface.

The translator never probes structure: it reads ``kind`` and dispatches.
Any object exposing ``kind`` plus the attributes of the matching variant
below is accepted, whichever library built it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional, Protocol, Tuple

SchemaKind = str  # "string" | "number" | "boolean" | "object" | "array"

KIND_STRING = "string"
KIND_NUMBER = "number"
KIND_BOOLEAN = "boolean"
KIND_OBJECT = "object"
KIND_ARRAY = "array"


class SchemaNode(Protocol):
    kind: SchemaKind
    description: Optional[str]
    default: Any
    enum: Optional[Tuple[Any, ...]]
    is_required: bool


@dataclass(frozen=True)
class _BaseSchema:
    description: Optional[str] = None
    default: Any = None
    enum: Optional[Tuple[Any, ...]] = None
    is_required: bool = False

    def required(self):
        return replace(self, is_required=True)

    def optional(self):
        return replace(self, is_required=False)

    def describe(self, text: str):
        return replace(self, description=text)

    def valid(self, *values: Any):
        return replace(self, enum=tuple(values))


@dataclass(frozen=True)
class StringSchema(_BaseSchema):
    kind: SchemaKind = field(default=KIND_STRING, init=False)
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    format: Optional[str] = None


@dataclass(frozen=True)
class NumberSchema(_BaseSchema):
    kind: SchemaKind = field(default=KIND_NUMBER, init=False)
    integer: bool = False
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    exclusive_minimum: bool = False
    exclusive_maximum: bool = False
    multiple_of: Optional[float] = None
    format: Optional[str] = None


@dataclass(frozen=True)
class BooleanSchema(_BaseSchema):
    kind: SchemaKind = field(default=KIND_BOOLEAN, init=False)


@dataclass(frozen=True, eq=False)
class ObjectSchema(_BaseSchema):
    kind: SchemaKind = field(default=KIND_OBJECT, init=False)
    properties: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, eq=False)
class ArraySchema(_BaseSchema):
    kind: SchemaKind = field(default=KIND_ARRAY, init=False)
    items: Any = None
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    unique_items: bool = False


def as_schema(value: Any) -> Any:
    """Plain ``{field: node}`` mappings stand for an implicit object schema."""
    if value is None or hasattr(value, "kind"):
        return value
    if isinstance(value, Mapping):
        return ObjectSchema(properties=dict(value))
    return value
