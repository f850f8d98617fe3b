"""Route descriptors and the factories that create them.

A descriptor is built step by step; every step returns a new frozen
descriptor::

    show_user = (
        get("/users/:id", {"id": int})
        .with_query_schema({"expand": (bool, False)})
        .with_action(show)
    )

``with_action`` must come last. Replacing a schema, or disabling
authentication, resets the action to :func:`not_implemented` because the
attached handler was written against the old inputs.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

from wren.errors import ConfigurationError
from wren.routing.pattern import parse_pattern
from wren.validation.schema import EMPTY_RECORD, NO_BODY, Schema, Shape, compile_shape

type Handler = Callable[..., Any]

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})

# Keyword arguments the dispatcher can pass to an action.
INJECTABLE = frozenset(
    {"request", "path_params", "query_params", "body", "principal", "db", "admin", "client"}
)
# Only available when the route authenticates its caller.
AUTHENTICATED_ONLY = frozenset({"principal", "db"})


def not_implemented(*_args: Any, **_kwargs: Any) -> Any:
    """Default action; fails synchronously."""
    raise NotImplementedError("Not implemented")


def _check_action(handler: Handler, *, auth_disabled: bool) -> None:
    """Reject handlers asking for arguments the dispatcher cannot supply."""
    if not callable(handler):
        msg = f"Route action must be callable, got {type(handler).__name__}"
        raise ConfigurationError(msg)
    try:
        sig = inspect.signature(handler)
    except (TypeError, ValueError):
        # Builtins and some C callables have no signature; they get no kwargs.
        return

    name = getattr(handler, "__qualname__", repr(handler))
    for param in sig.parameters.values():
        if param.kind in (inspect.Parameter.VAR_KEYWORD, inspect.Parameter.VAR_POSITIONAL):
            continue
        if param.name not in INJECTABLE:
            if param.default is not inspect.Parameter.empty:
                continue
            msg = (
                f"Action {name} declares parameter {param.name!r}; "
                f"available: {', '.join(sorted(INJECTABLE))}"
            )
            raise ConfigurationError(msg)
        if param.kind is inspect.Parameter.POSITIONAL_ONLY:
            msg = f"Action {name} parameter {param.name!r} must accept a keyword argument"
            raise ConfigurationError(msg)
        if auth_disabled and param.name in AUTHENTICATED_ONLY:
            msg = (
                f"Action {name} declares {param.name!r} but the route has "
                "authentication disabled"
            )
            raise ConfigurationError(msg)


@dataclass(frozen=True, slots=True)
class RouteDescriptor:
    """One method + pattern endpoint.

    Attributes:
        method: Upper-case HTTP method.
        path: Route pattern, e.g. ``/users/:id``.
        path_schema: Shape of the captured path parameters, if any.
        query_schema: Shape of the query string; ``None`` means the route
            accepts no query parameters.
        body_schema: ``NO_BODY`` for GET, ``EMPTY_RECORD`` by default otherwise.
        action: The handler. Defaults to :func:`not_implemented`.
        auth_disabled: Skip bearer-token authentication for this route.
    """

    method: str
    path: str
    path_schema: Schema | None = None
    query_schema: Schema | None = None
    body_schema: Schema = EMPTY_RECORD
    action: Handler = not_implemented
    auth_disabled: bool = False

    @property
    def name(self) -> str:
        return f"{self.method} {self.path}"

    @property
    def has_action(self) -> bool:
        return self.action is not not_implemented

    @property
    def param_names(self) -> tuple[str, ...]:
        return parse_pattern(self.path).param_names

    # -- Builder steps --

    def with_path_schema(self, shape: Shape) -> RouteDescriptor:
        """Replace the path-parameter shape and reset the action."""
        schema = compile_shape(shape, name=_model_name(self, "PathParams"))
        _check_path_schema(self.path, schema)
        return replace(self, path_schema=schema, action=not_implemented)

    def with_query_schema(self, shape: Shape | None) -> RouteDescriptor:
        """Replace the query shape and reset the action."""
        schema = compile_shape(shape, name=_model_name(self, "QueryParams"))
        return replace(self, query_schema=schema, action=not_implemented)

    def with_body_schema(self, shape: Shape | None) -> RouteDescriptor:
        """Replace the body shape and reset the action.

        GET routes carry no body; calling this on one raises
        ``ConfigurationError``.
        """
        if self.method == "GET":
            msg = "GET methods do not support changing the body schema"
            raise ConfigurationError(msg)
        schema = compile_shape(shape, name=_model_name(self, "Body"))
        return replace(
            self,
            body_schema=EMPTY_RECORD if schema is None else schema,
            action=not_implemented,
        )

    def with_auth_disabled(self, disabled: bool = True) -> RouteDescriptor:
        """Toggle authentication and reset the action.

        Actions on unauthenticated routes cannot ask for ``principal``
        or ``db``.
        """
        return replace(self, auth_disabled=disabled, action=not_implemented)

    def with_action(self, handler: Handler) -> RouteDescriptor:
        """Attach the handler. Must be the last step of the chain."""
        _check_action(handler, auth_disabled=self.auth_disabled)
        return replace(self, action=handler)


def _model_name(descriptor: RouteDescriptor, suffix: str) -> str:
    words = [part for part in descriptor.path.replace(":", "/").split("/") if part.isidentifier()]
    stem = "".join(word[:1].upper() + word[1:] for word in words)
    return f"{descriptor.method.title()}{stem}{suffix}"


def _check_path_schema(path: str, schema: Schema | None) -> None:
    names = parse_pattern(path).param_names
    if schema is None:
        if names:
            msg = (
                f"Path {path!r} has parameters ({', '.join(names)}); "
                "declare them with a path schema"
            )
            raise ConfigurationError(msg)
        return
    if schema.field_names is not None and schema.field_names != frozenset(names):
        msg = (
            f"Path schema keys ({', '.join(sorted(schema.field_names))}) do not match "
            f"the parameters of {path!r} ({', '.join(names) or 'none'})"
        )
        raise ConfigurationError(msg)


def route(method: str, path: str, schema: Shape | None = None) -> RouteDescriptor:
    """Create a descriptor for *method* and *path*.

    Without *schema* the path must be parameter-free. With *schema* its
    keys must equal the pattern's parameter names.
    """
    method = method.upper()
    if method not in HTTP_METHODS:
        msg = f"Unsupported method {method!r}; expected one of {', '.join(sorted(HTTP_METHODS))}"
        raise ConfigurationError(msg)
    parse_pattern(path)
    descriptor = RouteDescriptor(
        method=method,
        path=path,
        body_schema=NO_BODY if method == "GET" else EMPTY_RECORD,
    )
    path_schema = compile_shape(schema, name=_model_name(descriptor, "PathParams"))
    _check_path_schema(path, path_schema)
    return replace(descriptor, path_schema=path_schema)


def get(path: str, schema: Shape | None = None) -> RouteDescriptor:
    return route("GET", path, schema)


def post(path: str, schema: Shape | None = None) -> RouteDescriptor:
    return route("POST", path, schema)


def put(path: str, schema: Shape | None = None) -> RouteDescriptor:
    return route("PUT", path, schema)


def patch(path: str, schema: Shape | None = None) -> RouteDescriptor:
    return route("PATCH", path, schema)


def delete(path: str, schema: Shape | None = None) -> RouteDescriptor:
    return route("DELETE", path, schema)
