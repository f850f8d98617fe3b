"""Tests for input schemas and path/query/body parsing."""

import pytest
from pydantic import BaseModel

from wren.errors import ParseError, ValidationError
from wren.http.query import QueryParams
from wren.validation import (
    EMPTY_RECORD,
    NO_BODY,
    Issue,
    Schema,
    compile_shape,
    format_issues,
    parse_body,
    parse_path_params,
    parse_query_params,
)


class Dataset(BaseModel):
    name: str
    size: int = 0


class TestCompileShape:
    def test_none_stays_none(self) -> None:
        assert compile_shape(None) is None

    def test_schema_passes_through(self) -> None:
        schema = Schema(int)
        assert compile_shape(schema) is schema

    def test_field_map(self) -> None:
        schema = compile_shape({"id": int, "limit": (int, 20)}, name="Params")
        assert schema.field_names == frozenset({"id", "limit"})
        value = schema.validate({"id": "7"})
        assert value.id == 7
        assert value.limit == 20

    def test_field_map_ignores_unknown_keys(self) -> None:
        schema = compile_shape({"id": int})
        value = schema.validate({"id": 1, "other": "x"})
        assert not hasattr(value, "other")

    def test_model(self) -> None:
        schema = compile_shape(Dataset)
        assert schema.field_names == frozenset({"name", "size"})
        assert schema.validate({"name": "cells"}) == Dataset(name="cells")

    def test_arbitrary_annotation(self) -> None:
        schema = compile_shape(list[int])
        assert schema.field_names is None
        assert schema.validate(["1", 2]) == [1, 2]

    def test_accepts(self) -> None:
        schema = compile_shape({"id": int})
        assert schema.accepts({"id": 3})
        assert not schema.accepts({})


class TestPathParams:
    def test_no_schema_passes_strings(self) -> None:
        assert parse_path_params(None, {"id": "42"}) == {"id": "42"}

    def test_coerces(self) -> None:
        schema = compile_shape({"id": int})
        assert parse_path_params(schema, {"id": "42"}).id == 42

    def test_rejects(self) -> None:
        schema = compile_shape({"id": int})
        with pytest.raises(ValidationError) as exc_info:
            parse_path_params(schema, {"id": "abc"})
        assert exc_info.value.status == 400
        assert exc_info.value.detail.startswith("Error parsing path params: id: ")
        assert exc_info.value.issues[0].location == ("id",)


class TestQueryParams:
    def test_no_schema_no_query(self) -> None:
        assert parse_query_params(None, QueryParams(b"")) is None

    def test_no_schema_with_query(self) -> None:
        with pytest.raises(ParseError, match="this route does not accept any"):
            parse_query_params(None, QueryParams(b"x=1"))

    def test_required_fields_without_query(self) -> None:
        schema = compile_shape({"q": str})
        with pytest.raises(ParseError, match="Expected to receive query params, but none were passed."):
            parse_query_params(schema, QueryParams(b""))

    def test_defaulted_fields_without_query(self) -> None:
        schema = compile_shape({"limit": (int, 10)})
        with pytest.raises(ParseError, match="none were passed"):
            parse_query_params(schema, QueryParams(b""))

    def test_defaults_fill_missing_keys(self) -> None:
        schema = compile_shape({"limit": (int, 10), "name": (str, "")})
        value = parse_query_params(schema, QueryParams(b"name=ada"))
        assert (value.limit, value.name) == (10, "ada")

    def test_coerces_strings(self) -> None:
        schema = compile_shape({"limit": int, "active": bool})
        value = parse_query_params(schema, QueryParams(b"limit=5&active=true"))
        assert value.limit == 5
        assert value.active is True

    def test_last_repeated_value_wins(self) -> None:
        schema = compile_shape({"page": int})
        assert parse_query_params(schema, QueryParams(b"page=1&page=3")).page == 3

    def test_rejects(self) -> None:
        schema = compile_shape({"limit": int})
        with pytest.raises(ValidationError, match="Error parsing query params: limit"):
            parse_query_params(schema, QueryParams(b"limit=many"))


class TestBody:
    def test_no_body_ignores_input(self) -> None:
        assert parse_body(NO_BODY, b'{"anything": 1}') is None

    def test_empty_record_accepts_empty_body(self) -> None:
        assert parse_body(EMPTY_RECORD, b"") == {}
        assert parse_body(EMPTY_RECORD, b"{}") == {}

    def test_empty_record_rejects_keys(self) -> None:
        with pytest.raises(ValidationError, match="Expected an empty object"):
            parse_body(EMPTY_RECORD, b'{"name": "x"}')

    def test_empty_body_for_declared_schema(self) -> None:
        schema = compile_shape({"name": str})
        with pytest.raises(ParseError, match="Expected a JSON body"):
            parse_body(schema, b"")

    def test_malformed_json(self) -> None:
        schema = compile_shape({"name": str})
        with pytest.raises(ParseError, match="Malformed JSON"):
            parse_body(schema, b"{name:")

    def test_missing_field_is_named(self) -> None:
        schema = compile_shape({"name": str})
        with pytest.raises(ValidationError) as exc_info:
            parse_body(schema, b"{}")
        assert exc_info.value.detail == "Error parsing body params: name: Field required"
        assert exc_info.value.issues == (Issue(("name",), "Field required"),)

    def test_valid_body(self) -> None:
        value = parse_body(compile_shape(Dataset), b'{"name": "cells", "size": 3}')
        assert value == Dataset(name="cells", size=3)


class TestIssues:
    def test_format(self) -> None:
        issues = [Issue(("items", 0, "name"), "Field required"), Issue((), "Bad input")]
        assert format_issues(issues) == "items.0.name: Field required; Bad input"
