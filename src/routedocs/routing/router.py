from __future__ import annotations

from typing import Any, Optional, Sequence, Union

from routedocs.domain.models import RouteDescriptor


class Router:
    """Minimal router: a path prefix plus an ordered list of route descriptors.

    Any object exposing ``routes`` (and optionally ``prefix``) can be handed to
    SpecGenerator.add_router; this one exists so route tables can be declared
    without a web framework.
    """

    def __init__(self, prefix: str = ""):
        self.prefix = prefix
        self.routes: list[RouteDescriptor] = []

    def route(
        self,
        method: Union[str, Sequence[str]],
        path: str,
        *,
        validate: Optional[Any] = None,
        meta: Optional[Any] = None,
    ) -> RouteDescriptor:
        route = RouteDescriptor.model_validate(
            {"method": method, "path": path, "validate": validate, "meta": meta}
        )
        self.routes.append(route)
        return route

    def get(self, path: str, **kwargs: Any) -> RouteDescriptor:
        return self.route("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> RouteDescriptor:
        return self.route("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> RouteDescriptor:
        return self.route("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> RouteDescriptor:
        return self.route("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> RouteDescriptor:
        return self.route("DELETE", path, **kwargs)

    def head(self, path: str, **kwargs: Any) -> RouteDescriptor:
        return self.route("HEAD", path, **kwargs)

    def options(self, path: str, **kwargs: Any) -> RouteDescriptor:
        return self.route("OPTIONS", path, **kwargs)
