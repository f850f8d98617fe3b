"""Input validation — pydantic-backed schemas for path, query, and body.

Usage::

    from wren.validation import compile_shape, parse_body

    schema = compile_shape({"name": str, "tags": (list[str], [])}, name="CreateDataset")
    body = parse_body(schema, await request.body())
    body.name
"""

from wren.validation.result import Issue, format_issues, issues_from_pydantic
from wren.validation.schema import (
    BODY_ERROR_PREFIX,
    EMPTY_RECORD,
    NO_BODY,
    PATH_ERROR_PREFIX,
    QUERY_ERROR_PREFIX,
    Schema,
    Shape,
    compile_shape,
    parse_body,
    parse_path_params,
    parse_query_params,
)

__all__ = [
    "BODY_ERROR_PREFIX",
    "EMPTY_RECORD",
    "NO_BODY",
    "PATH_ERROR_PREFIX",
    "QUERY_ERROR_PREFIX",
    "Issue",
    "Schema",
    "Shape",
    "compile_shape",
    "format_issues",
    "issues_from_pydantic",
    "parse_body",
    "parse_path_params",
    "parse_query_params",
]
