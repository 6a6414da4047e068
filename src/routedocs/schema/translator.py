from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Mapping, Optional, Union

from routedocs.config import DEFAULT_MAX_DEPTH
from routedocs.errors import (
    CyclicSchemaError,
    SchemaDepthError,
    UnsupportedSchemaTypeError,
)
from routedocs.schema.types import (
    KIND_ARRAY,
    KIND_BOOLEAN,
    KIND_NUMBER,
    KIND_OBJECT,
    KIND_STRING,
    SchemaNode,
    as_schema,
)

logger = logging.getLogger(__name__)

SchemaDescription = dict[str, Any]

# (attribute on the schema node, key in the output document)
_COMMON_ATTRS = (("description", "description"), ("default", "default"))
_STRING_ATTRS = (
    ("min_length", "minLength"),
    ("max_length", "maxLength"),
    ("pattern", "pattern"),
    ("format", "format"),
)
_NUMBER_ATTRS = (
    ("minimum", "minimum"),
    ("maximum", "maximum"),
    ("multiple_of", "multipleOf"),
    ("format", "format"),
)
_ARRAY_ATTRS = (("min_items", "minItems"), ("max_items", "maxItems"))


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def _copy_attrs(node: Any, out: SchemaDescription, attrs) -> None:
    for attr, key in attrs:
        value = getattr(node, attr, None)
        if value is not None:
            out[key] = copy.deepcopy(value)


def _copy_flag(node: Any, out: SchemaDescription, attr: str, key: str) -> None:
    if getattr(node, attr, False):
        out[key] = True


class SchemaTranslator:
    """Recursive-descent translation of schema nodes into Swagger 2.0 schema objects.

    Unsupported kinds raise UnsupportedSchemaTypeError. Outside strict mode the
    offending field is dropped, ``on_skip`` is told about it and its siblings
    are still translated. Cycles and excessive depth are always fatal.
    """

    def __init__(
        self,
        *,
        strict: bool = False,
        max_depth: int = DEFAULT_MAX_DEPTH,
        on_skip: Optional[Callable[[UnsupportedSchemaTypeError], None]] = None,
    ):
        self.strict = strict
        self.max_depth = max_depth
        self.on_skip = on_skip
        self._dispatch = {
            KIND_STRING: self._string,
            KIND_NUMBER: self._number,
            KIND_BOOLEAN: self._boolean,
            KIND_OBJECT: self._object,
            KIND_ARRAY: self._array,
        }

    def translate(
        self, node: Union[SchemaNode, Mapping[str, Any]], path: str = ""
    ) -> Optional[SchemaDescription]:
        """Translate a root node. Returns None when the root itself was skipped."""
        return self._guarded(node, path, 0, frozenset())

    def skip(self, exc: UnsupportedSchemaTypeError) -> None:
        """Apply the unsupported-type policy: raise in strict mode, otherwise report."""
        if self.strict:
            raise exc
        if self.on_skip is None:
            logger.warning("skipping field: %s", exc)
        else:
            self.on_skip(exc)

    def _guarded(self, node: Any, path: str, depth: int, active: frozenset) -> Optional[SchemaDescription]:
        try:
            return self._visit(node, path, depth, active)
        except UnsupportedSchemaTypeError as exc:
            self.skip(exc)
            return None

    def _visit(self, raw: Any, path: str, depth: int, active: frozenset) -> SchemaDescription:
        if depth > self.max_depth:
            raise SchemaDepthError(path, self.max_depth)
        # identity of the caller's object, not of the implicit wrapper
        if id(raw) in active:
            raise CyclicSchemaError(path)
        node = as_schema(raw)

        kind = getattr(node, "kind", None)
        handler = self._dispatch.get(kind) if isinstance(kind, str) else None
        if handler is None:
            raise UnsupportedSchemaTypeError(path, kind if kind is not None else type(node).__name__)

        out: SchemaDescription = {"type": kind}
        _copy_attrs(node, out, _COMMON_ATTRS)
        enum = getattr(node, "enum", None)
        if enum is not None:
            out["enum"] = list(enum)
        handler(node, out, path, depth, active | {id(raw)})
        return out

    def _string(self, node, out, path, depth, active) -> None:
        _copy_attrs(node, out, _STRING_ATTRS)

    def _number(self, node, out, path, depth, active) -> None:
        if getattr(node, "integer", False):
            out["type"] = "integer"
        _copy_attrs(node, out, _NUMBER_ATTRS)
        _copy_flag(node, out, "exclusive_minimum", "exclusiveMinimum")
        _copy_flag(node, out, "exclusive_maximum", "exclusiveMaximum")

    def _boolean(self, node, out, path, depth, active) -> None:
        pass

    def _object(self, node, out, path, depth, active) -> None:
        properties: SchemaDescription = {}
        required: list[str] = []
        for name, child in (getattr(node, "properties", None) or {}).items():
            translated = self._guarded(child, _join(path, name), depth + 1, active)
            if translated is None:
                continue
            properties[name] = translated
            if getattr(child, "is_required", False):
                required.append(name)
        out["properties"] = properties
        if required:
            out["required"] = required

    def _array(self, node, out, path, depth, active) -> None:
        items = getattr(node, "items", None)
        if items is not None:
            translated = self._guarded(items, _join(path, "items"), depth + 1, active)
            if translated is not None:
                out["items"] = translated
        _copy_attrs(node, out, _ARRAY_ATTRS)
        _copy_flag(node, out, "unique_items", "uniqueItems")
