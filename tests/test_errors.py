"""Tests for the wren exception hierarchy and error responses."""

import logging

import httpx
import pydantic
import pytest

from wren.errors import (
    AuthenticationError,
    HTTPError,
    MethodNotAllowed,
    ParseError,
    ValidationError,
    WrenError,
)
from wren.http.query import QueryParams
from wren.http.request import Request
from wren.server.errors import error_response
from wren.validation.result import Issue


async def _receive() -> dict:
    return {"type": "http.request", "body": b"", "more_body": False}


def _request() -> Request:
    return Request(
        method="POST",
        path="/fn/items",
        headers=httpx.Headers(),
        query=QueryParams(),
        client=None,
        _receive=_receive,
    )


class TestHierarchy:
    def test_http_error_str(self) -> None:
        assert str(HTTPError(409, "exists")) == "409: exists"
        assert str(HTTPError(418)) == "418"

    def test_subclasses(self) -> None:
        for exc in (ParseError("x"), ValidationError("x"), AuthenticationError(), MethodNotAllowed()):
            assert isinstance(exc, HTTPError)
            assert isinstance(exc, WrenError)

    def test_statuses(self) -> None:
        assert ParseError("x").status == 400
        assert ValidationError("x").status == 400
        assert AuthenticationError().status == 401
        assert AuthenticationError().detail == "Unauthorized"
        assert MethodNotAllowed().status == 400

    def test_validation_error_keeps_issues(self) -> None:
        issues = (Issue(("name",), "Field required"),)
        exc = ValidationError("Error parsing body params: name: Field required", issues)
        assert exc.issues == issues
        assert exc.detail.endswith("name: Field required")

    def test_method_not_allowed_header(self) -> None:
        assert MethodNotAllowed(frozenset({"PUT", "GET"})).headers == (("Allow", "GET, PUT"),)
        assert MethodNotAllowed().headers == ()


class TestErrorResponse:
    def test_http_error(self) -> None:
        response = error_response(HTTPError(409, "exists", (("Retry-After", "5"),)), _request())
        assert response.status == 409
        assert response.json() == {"error": "exists"}
        assert response.header("Retry-After") == "5"

    def test_http_error_without_detail(self) -> None:
        assert error_response(HTTPError(418), _request()).json() == {"error": "Error 418"}

    def test_pydantic_error(self) -> None:
        with pytest.raises(pydantic.ValidationError) as exc_info:
            pydantic.TypeAdapter(int).validate_python("x")
        response = error_response(exc_info.value, _request())
        assert response.status == 400
        assert "valid integer" in response.json()["error"]

    def test_internal_error_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="wren.server"):
            response = error_response(KeyError("user"), _request())
        assert response.status == 500
        assert response.json() == {"error": "'user'"}
        assert "500 POST /fn/items" in caplog.text
        assert caplog.records[-1].levelno == logging.ERROR
