"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. Immutable by convention,
built incrementally by design.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from pydantic_core import from_json, to_json

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    Handlers that need full control return one of these; the dispatcher
    passes it through unchanged instead of JSON-encoding it.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = JSON_CONTENT_TYPE
    headers: tuple[tuple[str, str], ...] = ()

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Return a new Response with additional headers."""
        new = tuple(headers.items())
        return replace(self, headers=(*self.headers, *new))

    def with_content_type(self, content_type: str) -> Response:
        return replace(self, content_type=content_type)

    def header(self, name: str) -> str | None:
        """Return the first header named *name* (case-insensitive)."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None

    # -- Body access --

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes (encodes str bodies as UTF-8)."""
        if isinstance(self.body, bytes):
            return self.body
        return self.body.encode("utf-8")

    @property
    def text(self) -> str:
        """Body as text (decodes bytes bodies as UTF-8)."""
        if isinstance(self.body, str):
            return self.body
        return self.body.decode("utf-8")

    def json(self) -> Any:
        """Body parsed as JSON."""
        return from_json(self.body_bytes)


@dataclass(frozen=True, slots=True)
class Redirect:
    """A redirect returned by a handler.

    Sent as ``status`` (302 by default) with a ``Location`` header and no
    JSON body::

        async def finish(query_params):
            return Redirect("https://example.com/done")
    """

    url: str
    status: int = 302
    headers: tuple[tuple[str, str], ...] = ()


def json_response(
    data: Any,
    status: int = 200,
    headers: tuple[tuple[str, str], ...] = (),
) -> Response:
    """Build an ``application/json`` response from any JSON-serializable value.

    Pydantic models, dataclasses, datetimes, and UUIDs are serialized by
    ``pydantic_core.to_json``.
    """
    return Response(body=to_json(data), status=status, headers=headers)
