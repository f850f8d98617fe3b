"""Request outcomes and their encoding as responses.

A handler's result becomes one of three outcomes:

- :class:`Success`: a value sent as JSON (200, or the status of a
  ``(value, status)`` tuple whose status is a valid HTTP code); a
  ``Response`` passes through unchanged
- :class:`Redirected`: a returned ``Redirect``, sent without a JSON body
- :class:`Failure`: any exception, classified by :mod:`wren.server.errors`
"""

from dataclasses import dataclass
from typing import Any, assert_never

from wren.http.request import Request
from wren.http.response import Redirect, Response, json_response
from wren.middleware.cors import CORSConfig, add_cors_headers
from wren.server.errors import error_response


@dataclass(frozen=True, slots=True)
class Success:
    value: Any
    status: int = 200


@dataclass(frozen=True, slots=True)
class Redirected:
    redirect: Redirect


@dataclass(frozen=True, slots=True)
class Failure:
    error: Exception


type Outcome = Success | Redirected | Failure


def _is_status(value: int) -> bool:
    return not isinstance(value, bool) and 100 <= value <= 599


def outcome_of(result: Any) -> Outcome:
    """Classify a handler's return value."""
    match result:
        case Redirect():
            return Redirected(result)
        case (value, int() as status) if isinstance(result, tuple) and _is_status(status):
            return Success(value, status)
        case _:
            return Success(result)


def encode_outcome(outcome: Outcome, request: Request, cors: CORSConfig) -> Response:
    """Turn an outcome into the response sent to the client."""
    match outcome:
        case Success(value=Response() as response):
            return response
        case Success(value=value, status=status):
            return add_cors_headers(json_response(value, status=status), cors)
        case Redirected(redirect=redirect):
            return Response(
                body=b"",
                status=redirect.status,
                content_type="",
                headers=(("Location", redirect.url), *redirect.headers),
            )
        case Failure(error=error):
            return add_cors_headers(error_response(error, request), cors)
        case _:
            assert_never(outcome)
