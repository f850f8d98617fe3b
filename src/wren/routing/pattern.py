"""Path pattern parsing and matching.

Patterns look like ``/users/:id/files/:name``. Every non-empty segment is
either a literal, matched exactly and case-sensitively, or a parameter
marker (``:`` followed by a non-empty name) that captures the matching
request segment verbatim.

Matching is all-or-nothing: segment counts must agree, there are no
wildcards and no partial matches. Captured values are opaque strings;
typing them is the job of the route's path schema.
"""

from dataclasses import dataclass, field
from functools import lru_cache

from wren.errors import ConfigurationError

PARAM_MARKER = ":"


@dataclass(frozen=True, slots=True)
class PatternSegment:
    """A parsed segment of a route pattern.

    Literal: ``users`` (param_name=None)
    Param:   ``:id``   (param_name="id")
    """

    value: str
    param_name: str | None = None

    @property
    def is_param(self) -> bool:
        return self.param_name is not None


@dataclass(frozen=True, slots=True)
class ParsedPattern:
    """A normalized pattern and its segments, in order."""

    path: str
    segments: tuple[PatternSegment, ...]

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(seg.param_name for seg in self.segments if seg.param_name is not None)

    @property
    def has_params(self) -> bool:
        return any(seg.is_param for seg in self.segments)


@dataclass(frozen=True, slots=True)
class PathMatch:
    """Result of matching a request path against a pattern."""

    success: bool
    params: dict[str, str] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.success


NO_MATCH = PathMatch(success=False)


def normalize_path(path: str) -> str:
    """Ensure a single leading slash and strip trailing slashes.

    The root is canonically ``/``::

        normalize_path("users/42/") -> "/users/42"
        normalize_path("")          -> "/"
    """
    stripped = path.strip("/")
    if not stripped:
        return "/"
    return f"/{stripped}"


@lru_cache(maxsize=512)
def parse_pattern(pattern: str) -> ParsedPattern:
    """Parse a route pattern into literal and parameter segments.

    Raises ``ConfigurationError`` for a bare marker (``/users/:``) or a
    parameter name used twice in the same pattern.
    """
    normalized = normalize_path(pattern)
    if normalized == "/":
        return ParsedPattern(path="/", segments=())

    segments: list[PatternSegment] = []
    seen: set[str] = set()
    for part in normalized[1:].split("/"):
        if not part.startswith(PARAM_MARKER):
            segments.append(PatternSegment(value=part))
            continue
        name = part[len(PARAM_MARKER) :]
        if not name:
            msg = (
                f"Invalid pattern {pattern!r}: param name cannot be empty. "
                f"Use '{PARAM_MARKER}name' for path parameters."
            )
            raise ConfigurationError(msg)
        if name in seen:
            msg = f"Invalid pattern {pattern!r}: duplicate param name {name!r}."
            raise ConfigurationError(msg)
        seen.add(name)
        segments.append(PatternSegment(value=part, param_name=name))
    return ParsedPattern(path=normalized, segments=tuple(segments))


def match_path(pattern: str, path: str) -> PathMatch:
    """Match *path* against *pattern*, extracting parameter values.

    Examples::

        match_path("/users/:id", "/users/42")        -> PathMatch(True, {"id": "42"})
        match_path("/users/:id", "/users/42/extra")  -> PathMatch(False)
        match_path("/a/b/", "/a/b")                  -> PathMatch(True, {})
    """
    parsed = parse_pattern(pattern)
    normalized = normalize_path(path)

    if parsed.path == "/":
        return PathMatch(success=True) if normalized == "/" else NO_MATCH

    if not parsed.has_params:
        return PathMatch(success=True) if parsed.path == normalized else NO_MATCH

    if normalized == "/":
        return NO_MATCH
    parts = normalized[1:].split("/")
    if len(parts) != len(parsed.segments):
        return NO_MATCH

    params: dict[str, str] = {}
    for segment, part in zip(parsed.segments, parts, strict=True):
        if segment.param_name is not None:
            params[segment.param_name] = part
        elif segment.value != part:
            return NO_MATCH
    return PathMatch(success=True, params=params)
