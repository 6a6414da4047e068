from __future__ import annotations

import copy
from typing import Any, Iterable

from routedocs.config import SpecMetadata
from routedocs.domain.models import RouteDescriptor
from routedocs.routing.paths import PathTemplate

_GENERATED_KEYS = ("swagger", "info", "basePath", "paths", "tags")


def default_tag_strategy(route: RouteDescriptor, template: PathTemplate) -> list[str]:
    # /api/signup -> ["api"]; /{id} -> []
    literals = template.literals
    return [literals[0]] if literals else []


def merge_tags(declared: Iterable[dict[str, Any]], derived: Iterable[str]) -> list[dict[str, Any]]:
    """Declared tag objects first (verbatim), then derived names; de-duped by name."""
    out: list[dict[str, Any]] = []
    seen: set[str] = set()
    for tag in declared:
        name = tag.get("name")
        if name in seen:
            continue
        seen.add(name)
        out.append(copy.deepcopy(tag))
    for name in derived:
        if name in seen:
            continue
        seen.add(name)
        out.append({"name": name})
    return out


def assemble_document(
    metadata: SpecMetadata,
    paths: dict[str, dict[str, Any]],
    derived_tags: Iterable[str],
    swagger_version: str,
) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "swagger": swagger_version,
        "info": metadata.info.model_dump(),
        "basePath": metadata.base_path,
    }
    # host, schemes, securityDefinitions, ... pass through untouched
    for key, value in (metadata.model_extra or {}).items():
        if key not in _GENERATED_KEYS:
            doc[key] = copy.deepcopy(value)
    doc["paths"] = paths
    doc["tags"] = merge_tags(metadata.tags, derived_tags)
    return doc
