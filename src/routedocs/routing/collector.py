from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError

from routedocs.domain.models import CollectedRoute, RouteDescriptor
from routedocs.errors import InvalidRouterError

logger = logging.getLogger(__name__)


def _coerce_route(raw: Any, index: int) -> RouteDescriptor:
    if isinstance(raw, RouteDescriptor):
        return raw
    try:
        return RouteDescriptor.model_validate(raw)
    except ValidationError as exc:
        raise InvalidRouterError(f"route #{index} is not a valid route descriptor: {exc}") from exc


class RouteCollector:
    """Accumulates routes across routers in registration order. Nothing is ever removed."""

    def __init__(self) -> None:
        self._routes: list[CollectedRoute] = []

    @property
    def routes(self) -> tuple[CollectedRoute, ...]:
        return tuple(self._routes)

    def add_router(self, router: Any, prefix: Optional[str] = None) -> int:
        """
        Register every route of ``router``. An explicit ``prefix`` replaces the
        router's own prefix instead of composing with it.

        All routes are validated before any is stored, so a failing call leaves
        previously collected routes untouched. Returns the number of routes added.
        """
        routes = getattr(router, "routes", None)
        if routes is None or isinstance(routes, (str, bytes)) or not hasattr(routes, "__iter__"):
            raise InvalidRouterError(f"router {type(router).__name__} exposes no route list")

        own_prefix = getattr(router, "prefix", "") or ""
        if not isinstance(own_prefix, str):
            raise InvalidRouterError(f"router prefix must be a string, got {type(own_prefix).__name__}")
        effective = own_prefix if prefix is None else prefix

        coerced = [_coerce_route(r, i) for i, r in enumerate(routes)]

        start = len(self._routes)
        for offset, route in enumerate(coerced):
            self._routes.append(CollectedRoute(route=route, prefix=effective, order=start + offset))

        logger.debug("collected %d routes (prefix=%r)", len(coerced), effective)
        return len(coerced)
