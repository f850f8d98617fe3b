"""Schemas for path parameters, query parameters, and request bodies.

A route declares its input shapes with anything pydantic can validate:

- a field map: ``{"id": int, "limit": (int, 20)}``
- a ``BaseModel`` subclass
- any other annotation: ``list[int]``, a ``TypedDict``, ``dict[str, str]``

Field maps and models are validated into model instances, so handlers
read ``body.name``. Path and query values arrive as strings and rely on
pydantic's lax mode for coercion (``"42"`` → ``42``, ``"true"`` → ``True``).

Failures come in two kinds: :class:`~wren.errors.ParseError` when the input
could not be read at all, :class:`~wren.errors.ValidationError` when it was
read but rejected by the schema.
"""

from collections.abc import Mapping
from types import GenericAlias
from typing import Annotated, Any

import pydantic
from pydantic import AfterValidator, BaseModel, ConfigDict, TypeAdapter, create_model
from pydantic_core import from_json

from wren.errors import ParseError, ValidationError
from wren.validation.result import format_issues, issues_from_pydantic

PATH_ERROR_PREFIX = "Error parsing path params"
QUERY_ERROR_PREFIX = "Error parsing query params"
BODY_ERROR_PREFIX = "Error parsing body params"

type Shape = Mapping[str, Any] | type[BaseModel] | Schema | Any


def _is_model(annotation: Any) -> bool:
    return (
        isinstance(annotation, type)
        and not isinstance(annotation, GenericAlias)
        and issubclass(annotation, BaseModel)
    )


class Schema:
    """A compiled input shape backed by a pydantic ``TypeAdapter``.

    ``field_names`` is known for field maps and models and ``None`` for
    arbitrary annotations.
    """

    __slots__ = ("_adapter", "annotation", "field_names", "name")

    def __init__(
        self,
        annotation: Any,
        *,
        name: str | None = None,
        field_names: frozenset[str] | None = None,
    ) -> None:
        self.annotation = annotation
        self.name = name or getattr(annotation, "__name__", repr(annotation))
        if field_names is None and _is_model(annotation):
            field_names = frozenset(annotation.model_fields)
        self.field_names = field_names
        self._adapter: TypeAdapter[Any] = TypeAdapter(annotation)

    def __repr__(self) -> str:
        return f"Schema({self.name})"

    def validate(self, value: Any) -> Any:
        """Validate *value*; raises ``pydantic.ValidationError`` on rejection."""
        return self._adapter.validate_python(value)

    def accepts(self, value: Any) -> bool:
        try:
            self.validate(value)
        except pydantic.ValidationError:
            return False
        return True


def _reject_keys(value: dict[str, Any]) -> dict[str, Any]:
    if value:
        msg = f"Expected an empty object, got keys: {', '.join(sorted(value))}"
        raise ValueError(msg)
    return value


# GET routes carry no body.
NO_BODY = Schema(None, name="NoBody")

# Default body for mutating routes that declare none.
EMPTY_RECORD = Schema(
    Annotated[dict[str, Any], AfterValidator(_reject_keys)],
    name="EmptyRecord",
    field_names=frozenset(),
)


def compile_shape(shape: Shape | None, *, name: str = "Params") -> Schema | None:
    """Turn a declared shape into a :class:`Schema` (``None`` stays ``None``).

    Field map values are either an annotation (required) or an
    ``(annotation, default)`` pair. Unknown keys are ignored.
    """
    if shape is None or isinstance(shape, Schema):
        return shape
    if isinstance(shape, Mapping):
        fields: dict[str, Any] = {}
        for key, declared in shape.items():
            fields[key] = declared if isinstance(declared, tuple) else (declared, ...)
        model = create_model(name, __config__=ConfigDict(extra="ignore"), **fields)
        return Schema(model, name=name, field_names=frozenset(shape))
    return Schema(shape)


def _validate(schema: Schema, data: Any, prefix: str) -> Any:
    try:
        return schema.validate(data)
    except pydantic.ValidationError as exc:
        issues = issues_from_pydantic(exc)
        raise ValidationError(f"{prefix}: {format_issues(issues)}", issues) from exc


def parse_path_params(schema: Schema | None, raw: Mapping[str, str]) -> Any:
    """Validate captured path segments; without a schema they pass through as strings."""
    if schema is None:
        return dict(raw)
    return _validate(schema, dict(raw), PATH_ERROR_PREFIX)


def parse_query_params(schema: Schema | None, query: Mapping[str, str]) -> Any | None:
    """Validate query parameters against *schema*.

    - no schema, no query: ``None``
    - no schema, query present: ``ParseError``
    - schema, no query: ``ParseError``, even when every field has a default
    """
    if not query:
        if schema is None:
            return None
        msg = f"{QUERY_ERROR_PREFIX}: Expected to receive query params, but none were passed."
        raise ParseError(msg)
    if schema is None:
        msg = f"{QUERY_ERROR_PREFIX}: Received query params, but this route does not accept any."
        raise ParseError(msg)
    return _validate(schema, dict(query), QUERY_ERROR_PREFIX)


def parse_body(schema: Schema, raw: bytes) -> Any:
    """Decode a JSON body and validate it against *schema*.

    ``NO_BODY`` short-circuits to ``None`` without reading anything. An
    empty body is read as ``{}`` only for the default ``EMPTY_RECORD``.
    """
    if schema is NO_BODY:
        return None
    if not raw.strip():
        if schema is not EMPTY_RECORD:
            raise ParseError(f"{BODY_ERROR_PREFIX}: Expected a JSON body, but none was passed.")
        data: Any = {}
    else:
        try:
            data = from_json(raw)
        except ValueError as exc:
            raise ParseError(f"{BODY_ERROR_PREFIX}: Malformed JSON ({exc})") from exc
    return _validate(schema, data, BODY_ERROR_PREFIX)
