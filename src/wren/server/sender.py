"""Writing a Response to the ASGI send channel.

Header names go out lowercased, ``content-length`` is always set, and
statuses that forbid a body (1xx, 204, 304) are sent with an empty one.
"""

from wren._internal.asgi import Send
from wren.http.response import Response

_BODYLESS = frozenset({204, 304})


def encode_headers(response: Response, body: bytes) -> list[tuple[bytes, bytes]]:
    pairs = [(name.lower(), value) for name, value in response.headers]
    if response.content_type:
        pairs.insert(0, ("content-type", response.content_type))
    pairs.append(("content-length", str(len(body))))
    return [(name.encode("latin-1"), value.encode("latin-1")) for name, value in pairs]


async def send_response(response: Response, send: Send) -> None:
    status = response.status
    body = b"" if status < 200 or status in _BODYLESS else response.body_bytes
    await send({"type": "http.response.start", "status": status, "headers": encode_headers(response, body)})
    await send({"type": "http.response.body", "body": body})
