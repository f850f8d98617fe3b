"""Cross-origin headers.

Functions are called from browsers on other origins, so every response
carries permissive CORS headers and every ``OPTIONS`` request, whatever
its path, is answered directly with ``200 ok``.
"""

from dataclasses import dataclass, replace

from wren.http.response import Response


@dataclass(frozen=True, slots=True)
class CORSConfig:
    """CORS configuration.

    Defaults allow any origin with the headers browser clients of the data
    store send. Narrow what you need::

        CORSConfig(allow_origin="https://app.example.com")
    """

    allow_origin: str = "*"
    allow_methods: tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")
    allow_headers: tuple[str, ...] = ("authorization", "x-client-info", "apikey", "content-type")
    expose_headers: tuple[str, ...] = ()
    max_age: int | None = None

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        """Headers added to every response."""
        headers = [
            ("Access-Control-Allow-Origin", self.allow_origin),
            ("Access-Control-Allow-Headers", ", ".join(self.allow_headers)),
            ("Access-Control-Allow-Methods", ", ".join(self.allow_methods)),
        ]
        if self.allow_origin != "*":
            headers.append(("Vary", "Origin"))
        if self.expose_headers:
            headers.append(("Access-Control-Expose-Headers", ", ".join(self.expose_headers)))
        return tuple(headers)


def add_cors_headers(response: Response, config: CORSConfig) -> Response:
    """Return *response* with the CORS headers it does not already carry."""
    present = {name.lower() for name, _ in response.headers}
    missing = tuple((name, value) for name, value in config.headers if name.lower() not in present)
    if not missing:
        return response
    return replace(response, headers=(*response.headers, *missing))


def preflight_response(config: CORSConfig) -> Response:
    """The ``200 ok`` answer to any ``OPTIONS`` request."""
    response = Response(body="ok", content_type="text/plain; charset=utf-8", headers=config.headers)
    if config.max_age is not None:
        response = response.with_header("Access-Control-Max-Age", str(config.max_age))
    return response
