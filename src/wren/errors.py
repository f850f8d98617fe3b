"""Wren exception hierarchy.

Shared across routing, validation, authentication, and the dispatcher so
every module raises and catches the same types. Nothing below the
dispatcher builds an HTTP response; components raise one of these and the
dispatcher translates it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wren.validation.result import Issue


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when routes or app configuration are invalid.

    Typically raised while building route descriptors or during
    ``App`` construction, before any request is served.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raise it from a handler to send ``{"error": detail}`` with *status*::

        raise HTTPError(409, "Dataset already exists")
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class ParseError(HTTPError):
    """400 — input could not be read (malformed JSON, unexpected query)."""

    def __init__(self, detail: str) -> None:
        super().__init__(status=400, detail=detail)


@dataclass(frozen=True, slots=True, init=False)
class ValidationError(HTTPError):
    """400 — input was well-formed but rejected by its schema.

    ``issues`` keeps the field-level failures so callers can inspect them;
    ``detail`` is the human-readable rendering.
    """

    issues: tuple[Issue, ...] = field(default=())

    def __init__(self, detail: str, issues: tuple[Issue, ...] = ()) -> None:
        object.__setattr__(self, "status", 400)
        object.__setattr__(self, "detail", detail)
        object.__setattr__(self, "headers", ())
        object.__setattr__(self, "issues", issues)


class AuthenticationError(HTTPError):
    """401 — bearer token missing, malformed, or failed verification."""

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(status=401, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """400 — no registered route accepts this method and path.

    Sent as a bad request rather than 405. When other methods are
    registered for the path, they are listed in the ``Allow`` header.
    """

    def __init__(
        self,
        allowed: frozenset[str] = frozenset(),
        detail: str = "Method not allowed",
    ) -> None:
        headers = (("Allow", ", ".join(sorted(allowed))),) if allowed else ()
        super().__init__(status=400, detail=detail, headers=headers)
