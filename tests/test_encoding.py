"""Tests for handler outcomes and their encoding."""

import httpx
import pytest

from wren.errors import ParseError
from wren.http.query import QueryParams
from wren.http.request import Request
from wren.http.response import Redirect, Response
from wren.middleware.cors import CORSConfig
from wren.server.encoding import Failure, Redirected, Success, encode_outcome, outcome_of


async def _receive() -> dict:
    return {"type": "http.request", "body": b"", "more_body": False}


REQUEST = Request(
    method="GET",
    path="/fn/items",
    headers=httpx.Headers(),
    query=QueryParams(),
    client=None,
    _receive=_receive,
)


class TestOutcomeOf:
    def test_plain_value(self) -> None:
        assert outcome_of({"a": 1}) == Success({"a": 1})

    def test_redirect(self) -> None:
        redirect = Redirect("/next")
        assert outcome_of(redirect) == Redirected(redirect)

    def test_value_status_tuple(self) -> None:
        assert outcome_of(({"id": 1}, 201)) == Success({"id": 1}, 201)

    @pytest.mark.parametrize("value", [[{"id": 1}, 201], ("x", True), (1, 2, 3), ("a", "b"), (51, 0), (3, 99), (7, 600)])
    def test_other_sequences_are_values(self, value: object) -> None:
        assert outcome_of(value) == Success(value)

    def test_none(self) -> None:
        assert outcome_of(None) == Success(None)


class TestEncodeOutcome:
    def test_success_is_json_with_cors(self) -> None:
        response = encode_outcome(Success([1, 2], 202), REQUEST, CORSConfig())
        assert response.status == 202
        assert response.json() == [1, 2]
        assert response.header("Access-Control-Allow-Origin") == "*"

    def test_response_passes_through(self) -> None:
        original = Response("raw", content_type="text/plain")
        assert encode_outcome(Success(original), REQUEST, CORSConfig()) is original

    def test_redirect(self) -> None:
        redirect = Redirect("https://example.test", status=307, headers=(("X-A", "1"),))
        response = encode_outcome(Redirected(redirect), REQUEST, CORSConfig())
        assert response.status == 307
        assert response.body_bytes == b""
        assert response.content_type == ""
        assert response.headers == (("Location", "https://example.test"), ("X-A", "1"))

    def test_failure(self) -> None:
        response = encode_outcome(Failure(ParseError("bad input")), REQUEST, CORSConfig())
        assert response.status == 400
        assert response.json() == {"error": "bad input"}
        assert response.header("Access-Control-Allow-Origin") == "*"
