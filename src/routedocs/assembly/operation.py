from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Optional, Sequence

from routedocs.assembly.parameters import (
    Parameter,
    apply_overrides,
    body_parameter,
    path_parameters,
    schema_parameters,
)
from routedocs.assembly.responses import assemble_responses
from routedocs.config import GenerateOptions
from routedocs.domain.models import RouteDescriptor, RouteMeta, ValidationSpec
from routedocs.routing.paths import PathTemplate
from routedocs.schema.translator import SchemaTranslator

logger = logging.getLogger(__name__)

Operation = dict[str, Any]

BODY_METHODS = {"POST", "PUT", "PATCH"}

# Swagger 2.0 only carries bodies as parameters; other methods keep theirs here
REQUEST_BODY_KEY = "x-requestBody"

_CONSUMES = {
    "json": "application/json",
    "form": "application/x-www-form-urlencoded",
    "multipart": "multipart/form-data",
}


def _body_parameters(validation: ValidationSpec, translator: SchemaTranslator) -> list[Parameter]:
    if validation.body is None:
        return []
    if validation.type in ("form", "multipart"):
        return schema_parameters(validation.body, "formData", "body", translator)
    param = body_parameter(validation.body, translator)
    return [param] if param is not None else []


def _detached_body(
    method: str,
    validation: ValidationSpec,
    translator: SchemaTranslator,
    warn: Callable[[str], None],
) -> Optional[dict[str, Any]]:
    if validation.body is None:
        return None
    param = body_parameter(validation.body, translator)
    if param is None:
        return None
    warn(f"request body on {method} documented under {REQUEST_BODY_KEY}, not as a parameter")
    return {"required": param["required"], "schema": param["schema"]}


def build_operations(
    route: RouteDescriptor,
    template: PathTemplate,
    tags: Sequence[str],
    options: GenerateOptions,
    translator: SchemaTranslator,
    warn: Callable[[str], None],
) -> dict[str, Operation]:
    """Build one operation object per HTTP method of ``route``, keyed by lowercase method.

    summary and description are always present (empty when the route has no
    metadata). Bodies on methods outside BODY_METHODS are translated but kept
    under REQUEST_BODY_KEY so ``parameters`` stays path + query + header.
    """
    validation = route.validation or ValidationSpec()
    meta = route.meta or RouteMeta()

    shared = path_parameters(template.parameters, validation.params, translator)
    shared += schema_parameters(validation.query, "query", "query", translator)
    shared += schema_parameters(validation.header, "header", "header", translator)

    responses = assemble_responses(
        validation.output, meta.output, options.default_responses, translator
    )

    operations: dict[str, Operation] = {}
    for method in route.methods:
        request_body = None
        if method in BODY_METHODS:
            body = _body_parameters(validation, translator)
        else:
            body = []
            request_body = _detached_body(method, validation, translator, warn)
        parameters = apply_overrides(shared + body, meta.parameters, warn)

        op: Operation = {}
        if tags:
            op["tags"] = list(tags)
        op["summary"] = meta.summary or ""
        op["description"] = meta.description or ""
        if meta.operation_id is not None:
            op["operationId"] = meta.operation_id
        if body:
            op["consumes"] = [_CONSUMES[validation.type or "json"]]
        op["parameters"] = parameters
        if request_body is not None:
            op[REQUEST_BODY_KEY] = request_body
        op["responses"] = copy.deepcopy(responses)
        if meta.deprecated:
            op["deprecated"] = True

        for key, value in meta.extra.items():
            if key in op:
                warn(f"metadata key {key!r} collides with a generated key and was ignored")
                continue
            op[key] = copy.deepcopy(value)

        operations[method.lower()] = op
        logger.debug("built operation %s %s", method, template.template)
    return operations
