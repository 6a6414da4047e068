from __future__ import annotations

from http import HTTPStatus
from typing import Any, Mapping, Optional

from routedocs.domain.models import OutputSpec
from routedocs.errors import UnsupportedSchemaTypeError
from routedocs.schema.translator import SchemaTranslator
from routedocs.schema.types import KIND_OBJECT, as_schema

Response = dict[str, Any]


def _reason(status: str) -> Optional[str]:
    try:
        return HTTPStatus(int(status)).phrase
    except ValueError:
        return None


def _headers(spec: OutputSpec, root: str, translator: SchemaTranslator) -> dict[str, Any]:
    node = as_schema(spec.headers)
    if node is None:
        return {}
    if getattr(node, "kind", None) != KIND_OBJECT:
        translator.skip(UnsupportedSchemaTypeError(root, getattr(node, "kind", type(node).__name__)))
        return {}
    out: dict[str, Any] = {}
    for name, child in (getattr(node, "properties", None) or {}).items():
        translated = translator.translate(child, f"{root}.{name}")
        if translated is None:
            continue
        if translated.get("type") == KIND_OBJECT:
            translator.skip(UnsupportedSchemaTypeError(f"{root}.{name}", KIND_OBJECT))
            continue
        out[name] = translated
    return out


def build_response(
    status: str,
    spec: OutputSpec,
    default_responses: Optional[Mapping[str, str]],
    translator: SchemaTranslator,
) -> Response:
    schema = None
    if spec.body is not None:
        schema = translator.translate(spec.body, f"output.{status}.body")

    description = (
        spec.description
        or (schema or {}).get("description")
        or (default_responses or {}).get(status)
        or _reason(status)
        or "Response"
    )

    resp: Response = {"description": description}
    if schema is not None:
        resp["schema"] = schema
    headers = _headers(spec, f"output.{status}.headers", translator)
    if headers:
        resp["headers"] = headers
    return resp


def assemble_responses(
    inside: Mapping[str, OutputSpec],
    outside: Mapping[str, OutputSpec],
    default_responses: Optional[Mapping[str, str]],
    translator: SchemaTranslator,
) -> dict[str, Response]:
    """
    Merge the validation output map with the metadata output map (metadata wins
    per status code, other entries from both survive), then fill in default
    responses for every status still missing. No defaults when disabled.
    """
    merged: dict[str, OutputSpec] = dict(inside)
    merged.update(outside)

    responses = {
        status: build_response(status, spec, default_responses, translator)
        for status, spec in merged.items()
    }
    for status, description in (default_responses or {}).items():
        if status not in responses:
            responses[status] = {"description": description}
    return responses
