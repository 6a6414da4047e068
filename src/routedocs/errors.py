from __future__ import annotations


class RoutedocsError(Exception):
    """Base class for everything raised by routedocs."""


class MissingMetadataError(RoutedocsError):
    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__("missing required spec metadata: " + ", ".join(self.missing))


class InvalidRouterError(RoutedocsError):
    pass


class InvalidOptionsError(RoutedocsError):
    pass


class UnsupportedSchemaTypeError(RoutedocsError):
    """A schema node whose kind cannot be expressed in the output document.

    ``path`` is the dot-separated field path from the schema root
    (e.g. ``body.address.zip``).
    """

    def __init__(self, path: str, kind: object):
        self.path = path
        self.kind = kind
        super().__init__(f"unsupported schema type {kind!r} at {path or '<root>'}")


class MalformedPathError(RoutedocsError):
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"malformed route path {path!r}: {reason}")


class SchemaStructureError(RoutedocsError):
    """Structural schema problems. Always fatal, even outside strict mode."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{message} at {path or '<root>'}")


class CyclicSchemaError(SchemaStructureError):
    def __init__(self, path: str):
        super().__init__(path, "cyclic schema reference")


class SchemaDepthError(SchemaStructureError):
    def __init__(self, path: str, max_depth: int):
        self.max_depth = max_depth
        super().__init__(path, f"schema nesting exceeds max depth {max_depth}")
