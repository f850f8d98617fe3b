"""The incoming request as the dispatcher sees it.

``path`` is the raw, still percent-encoded request path: route patterns
match against it segment by segment, so an encoded ``%2F`` stays inside
one parameter instead of splitting it. Headers are ``httpx.Headers``
built straight from the ASGI byte pairs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic_core import from_json

from wren._internal.asgi import Receive, Scope
from wren.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """One HTTP request to the function.

    ``path_params`` holds the raw strings captured by the route pattern,
    before schema validation. The body is read from the ASGI channel on
    first access and kept for later calls.
    """

    method: str
    path: str
    headers: httpx.Headers
    query: QueryParams
    client: tuple[str, int] | None
    _receive: Receive
    path_params: dict[str, str] = field(default_factory=dict)
    _body: list[bytes] = field(default_factory=list, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def authorization(self) -> str | None:
        return self.headers.get("authorization")

    @property
    def url(self) -> str:
        """Path plus query string, as the client sent them."""
        if not self.query.raw:
            return self.path
        return f"{self.path}?{self.query.raw.decode('latin-1')}"

    async def body(self) -> bytes:
        if not self._body:
            chunks: list[bytes] = []
            more = True
            while more:
                message = await self._receive()
                chunks.append(message.get("body", b""))
                more = message.get("more_body", False)
            self._body.append(b"".join(chunks))
        return self._body[0]

    async def json(self) -> Any:
        return from_json(await self.body())

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Build a request from an ASGI HTTP scope.

        Prefers ``raw_path`` over the server-decoded ``path``; the raw
        form may carry a query string on some servers, which is dropped.
        """
        raw_path = scope.get("raw_path")
        if raw_path:
            path = raw_path.decode("latin-1").partition("?")[0]
        else:
            path = scope["path"]
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=path,
            headers=httpx.Headers(list(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            client=tuple(client) if client else None,
            _receive=receive,
        )
