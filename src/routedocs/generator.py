from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from routedocs.assembly.document import assemble_document, default_tag_strategy
from routedocs.assembly.operation import build_operations
from routedocs.config import GenerateOptions, SpecMetadata, resolve_metadata, resolve_options
from routedocs.domain.models import CollectedRoute, GenerationWarning
from routedocs.errors import MalformedPathError
from routedocs.routing.collector import RouteCollector
from routedocs.routing.paths import join_prefix, normalize_path
from routedocs.schema.translator import SchemaTranslator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationReport:
    document: dict[str, Any]
    warnings: tuple[GenerationWarning, ...]


class _WarningLog:
    """Collects warnings for one generation call, tagged with the route being processed."""

    def __init__(self, on_warning: Optional[Callable[[GenerationWarning], Any]]):
        self.on_warning = on_warning
        self.items: list[GenerationWarning] = []
        self.route = ""

    def __call__(self, message: str) -> None:
        w = GenerationWarning(route=self.route, message=message)
        self.items.append(w)
        logger.warning("%s: %s", w.route, w.message)
        if self.on_warning is not None:
            self.on_warning(w)


def _label(collected: CollectedRoute) -> str:
    route = collected.route
    return f"{','.join(route.methods)} {join_prefix(collected.prefix, route.path)}"


def _operation_tags(paths: Mapping[str, Mapping[str, Any]]) -> Iterable[str]:
    for ops in paths.values():
        for op in ops.values():
            yield from op.get("tags", ())


class SpecGenerator:
    """
    Builder for a Swagger 2.0 document: register routers, then generate.

    Routes accumulate across add_router calls for the lifetime of the instance.
    generate_spec only reads them, so it can be called any number of times.
    Not safe for concurrent add_router calls.
    """

    def __init__(self) -> None:
        self._collector = RouteCollector()

    @property
    def routes(self) -> tuple[CollectedRoute, ...]:
        return self._collector.routes

    def add_router(self, router: Any, prefix: Optional[str] = None) -> int:
        return self._collector.add_router(router, prefix=prefix)

    def generate_spec(
        self,
        metadata: Union[SpecMetadata, Mapping[str, Any]],
        options: Union[GenerateOptions, Mapping[str, Any], None] = None,
    ) -> dict[str, Any]:
        return self.generate_report(metadata, options).document

    def generate_report(
        self,
        metadata: Union[SpecMetadata, Mapping[str, Any]],
        options: Union[GenerateOptions, Mapping[str, Any], None] = None,
    ) -> GenerationReport:
        opts = resolve_options(options)
        meta = resolve_metadata(metadata)

        warn = _WarningLog(opts.on_warning)
        translator = SchemaTranslator(
            strict=opts.strict,
            max_depth=opts.max_depth,
            on_skip=lambda exc: warn(str(exc)),
        )
        tag_strategy = opts.tag_strategy or default_tag_strategy

        paths: dict[str, dict[str, Any]] = {}
        for collected in self._collector.routes:
            route = collected.route
            warn.route = _label(collected)
            try:
                template = normalize_path(collected.prefix, route.path)
            except MalformedPathError as exc:
                if opts.strict:
                    raise
                warn(f"route skipped: {exc}")
                continue

            if route.meta is not None and route.meta.tags is not None:
                tags = list(route.meta.tags)
            else:
                tags = list(tag_strategy(route, template))

            ops = build_operations(route, template, tags, opts, translator, warn)
            # same template + method registered twice: the later route wins
            paths.setdefault(template.template, {}).update(ops)

        document = assemble_document(meta, paths, _operation_tags(paths), opts.swagger_version)
        logger.debug("generated spec with %d paths, %d warnings", len(paths), len(warn.items))
        return GenerationReport(document=document, warnings=tuple(warn.items))
