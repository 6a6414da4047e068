from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from routedocs.errors import MalformedPathError

_PARAM_NAME = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")
# path-to-regexp style modifiers after a name or constraint: :id? :rest* :rest+
_MODIFIERS = "?*+"


@dataclass(frozen=True)
class Param:
    name: str


Part = Union[str, Param]


@dataclass(frozen=True)
class Segment:
    """One slash-delimited piece of a path: literal text interleaved with parameters."""

    parts: tuple[Part, ...]

    @property
    def text(self) -> str:
        return "".join(f"{{{p.name}}}" if isinstance(p, Param) else p for p in self.parts)

    @property
    def is_literal(self) -> bool:
        return not any(isinstance(p, Param) for p in self.parts)


@dataclass(frozen=True)
class PathTemplate:
    """Ordered path segments; parameter names are unique within one template."""

    segments: tuple[Segment, ...]

    @property
    def template(self) -> str:
        # "/:a/:b/" splits to ("", a, b, "") so leading/trailing slashes round-trip
        return "/".join(s.text for s in self.segments)

    @property
    def parameters(self) -> tuple[str, ...]:
        return tuple(p.name for s in self.segments for p in s.parts if isinstance(p, Param))

    @property
    def literals(self) -> tuple[str, ...]:
        return tuple(s.text for s in self.segments if s.is_literal and s.text)


def join_prefix(prefix: str, path: str) -> str:
    """
    Join a router prefix and a route path with exactly one slash at the join point.
      ("/api", "/signup")  -> "/api/signup"
      ("/api/", "signup")  -> "/api/signup"
      ("", "/signup")      -> "/signup"
    """
    prefix = (prefix or "").strip()
    path = (path or "").strip()
    if not prefix:
        return path or "/"
    if not path:
        return prefix
    return prefix.rstrip("/") + "/" + path.lstrip("/")


def _skip_group(raw: str, seg: str, start: int) -> int:
    """Return the index just past the ")" matching the "(" at ``start``."""
    depth = 0
    i = start
    while i < len(seg):
        c = seg[i]
        if c == "\\":
            i += 2
            continue
        if c == "(":
            depth += 1
        elif c == ")":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    raise MalformedPathError(raw, f"unbalanced '(' in segment {seg!r}")


def _parse_segment(raw: str, seg: str) -> Segment:
    """
      users          -> ("users",)
      :id(\\d+)      -> (Param(id),)
      :name.json     -> (Param(name), ".json")
    """
    parts: list[Part] = []
    buf = ""
    i = 0
    while i < len(seg):
        c = seg[i]
        if c == ")":
            raise MalformedPathError(raw, f"unbalanced ')' in segment {seg!r}")
        if c in "{}":
            raise MalformedPathError(raw, "brace placeholders are not valid in route paths")
        if c == "(":
            end = _skip_group(raw, seg, i)
            buf += seg[i:end]
            i = end
            continue
        if c != ":":
            buf += c
            i += 1
            continue

        m = _PARAM_NAME.match(seg, i)
        if m is None:
            raise MalformedPathError(raw, f"empty or invalid parameter name in segment {seg!r}")
        if buf:
            parts.append(buf)
            buf = ""
        parts.append(Param(m.group(1)))
        i = m.end()
        # the regex constraint only narrows matching; it never shows in the template
        if i < len(seg) and seg[i] == "(":
            i = _skip_group(raw, seg, i)
        if i < len(seg) and seg[i] in _MODIFIERS:
            i += 1
    if buf or not parts:
        parts.append(buf)
    return Segment(parts=tuple(parts))


def parse_path(raw: str) -> PathTemplate:
    """
    Parse a colon-style route path into a PathTemplate.
      /:action/:id/       -> /{action}/{id}/  params=(action, id)
      /users/:id(\\d+)    -> /users/{id}
      /files/:name.json   -> /files/{name}.json

    Literal segments, repeated slashes and trailing slashes are preserved exactly.
    """
    p = (raw or "").strip()
    if not p.startswith("/"):
        p = "/" + p

    segments = [_parse_segment(raw, seg) for seg in p.split("/")]

    seen: set[str] = set()
    for name in PathTemplate(segments=tuple(segments)).parameters:
        if name in seen:
            raise MalformedPathError(raw, f"duplicate parameter {name!r}")
        seen.add(name)

    return PathTemplate(segments=tuple(segments))


def normalize_path(prefix: str, raw: str) -> PathTemplate:
    return parse_path(join_prefix(prefix, raw))
