from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Iterable, Optional, Sequence

from routedocs.domain.models import ParameterOverride
from routedocs.errors import UnsupportedSchemaTypeError
from routedocs.schema.translator import SchemaTranslator
from routedocs.schema.types import KIND_ARRAY, KIND_OBJECT, as_schema

logger = logging.getLogger(__name__)

Parameter = dict[str, Any]

# schema keys that only make sense on a schema object, never inline on a parameter
_SCHEMA_ONLY = ("properties", "required", "description")


def _properties(schema: Any, root: str, translator: SchemaTranslator) -> Optional[dict[str, Any]]:
    node = as_schema(schema)
    if node is None:
        return None
    if getattr(node, "kind", None) != KIND_OBJECT:
        translator.skip(UnsupportedSchemaTypeError(root, getattr(node, "kind", type(node).__name__)))
        return None
    return dict(getattr(node, "properties", None) or {})


def _inline(
    name: str,
    location: str,
    required: bool,
    translated: dict[str, Any],
) -> Parameter:
    param: Parameter = {"name": name, "in": location}
    if translated.get("description") is not None:
        param["description"] = translated["description"]
    param["required"] = required
    for key, value in translated.items():
        if key not in _SCHEMA_ONLY:
            param[key] = value
    if translated.get("type") == KIND_ARRAY and location in ("query", "formData"):
        param["collectionFormat"] = "multi"
    return param


def path_parameters(
    names: Sequence[str],
    params_schema: Any,
    translator: SchemaTranslator,
) -> list[Parameter]:
    """
    One entry per path placeholder, in path order. Placeholders without a
    matching params schema field are inferred as plain strings.
    """
    props = _properties(params_schema, "params", translator) or {}
    out: list[Parameter] = []
    for name in names:
        translated = None
        if name in props:
            translated = translator.translate(props[name], f"params.{name}")
            if translated is not None and translated.get("type") == KIND_OBJECT:
                translator.skip(UnsupportedSchemaTypeError(f"params.{name}", KIND_OBJECT))
                translated = None
        if translated is None:
            translated = {"type": "string"}
        # path parameters are always required
        out.append(_inline(name, "path", True, translated))
    return out


def schema_parameters(
    schema: Any,
    location: str,
    root: str,
    translator: SchemaTranslator,
) -> list[Parameter]:
    """Flatten an object schema (query, header, form body) into one parameter per property."""
    props = _properties(schema, root, translator)
    if not props:
        return []
    out: list[Parameter] = []
    for name, child in props.items():
        field_path = f"{root}.{name}"
        translated = translator.translate(child, field_path)
        if translated is None:
            continue
        if translated.get("type") == KIND_OBJECT:
            translator.skip(UnsupportedSchemaTypeError(field_path, KIND_OBJECT))
            continue
        out.append(_inline(name, location, bool(getattr(child, "is_required", False)), translated))
    return out


def body_parameter(schema: Any, translator: SchemaTranslator) -> Optional[Parameter]:
    translated = translator.translate(schema, "body")
    if translated is None:
        return None
    required = bool(getattr(schema, "is_required", False)) or bool(translated.get("required"))
    return {"name": "body", "in": "body", "required": required, "schema": translated}


def apply_overrides(
    parameters: Iterable[Parameter],
    overrides: Sequence[ParameterOverride],
    on_unmatched: Optional[Callable[[str], None]] = None,
) -> list[Parameter]:
    """
    Merge externally supplied parameter descriptions by name.

    Never adds or removes parameters, and never replaces a description that
    already came from a schema.
    """
    out = [copy.deepcopy(p) for p in parameters]
    for ov in overrides:
        matches = [p for p in out if p["name"] == ov.name and (ov.location is None or p["in"] == ov.location)]
        if not matches:
            msg = f"parameter override {ov.name!r} matches no parameter"
            if on_unmatched is None:
                logger.warning(msg)
            else:
                on_unmatched(msg)
            continue
        for p in matches:
            if ov.description is not None and p.get("description") is None:
                p["description"] = ov.description
    return out
