"""Error classification for failed requests.

Every failure is caught once, in the dispatcher, and turned into
``{"error": message}`` here:

- ``HTTPError`` (including parse, validation, and authentication errors):
  its own status and detail
- ``pydantic.ValidationError`` escaping a handler: 400 with field issues
- anything else: 500 with the exception message, logged with traceback
"""

import logging

import pydantic

from wren.errors import HTTPError
from wren.http.request import Request
from wren.http.response import Response, json_response
from wren.validation.result import format_issues, issues_from_pydantic

logger = logging.getLogger("wren.server")


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Map an ``HTTPError`` to its status and ``{"error": detail}``."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)
    detail = exc.detail or f"Error {exc.status}"
    return json_response({"error": detail}, status=exc.status, headers=exc.headers)


def handle_validation_error(exc: pydantic.ValidationError, request: Request) -> Response:
    """A handler validated something itself and it failed."""
    detail = format_issues(issues_from_pydantic(exc))
    logger.debug("400 %s %s — %s", request.method, request.path, detail)
    return json_response({"error": detail}, status=400)


def handle_internal_error(exc: Exception, request: Request) -> Response:
    """Unclassified failure: 500 with the stringified message."""
    kind = type(exc).__name__
    message = str(exc) or kind
    logger.exception("500 %s %s — %s: %s", request.method, request.path, kind, message)
    return json_response({"error": message}, status=500)


def error_response(exc: Exception, request: Request) -> Response:
    if isinstance(exc, HTTPError):
        return handle_http_error(exc, request)
    if isinstance(exc, pydantic.ValidationError):
        return handle_validation_error(exc, request)
    return handle_internal_error(exc, request)
