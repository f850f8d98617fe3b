"""Wren — routing and request dispatch for small serverless functions.

Each function serves one namespace of JSON routes. Routes declare their
path, query, and body shapes; requests are authenticated with a bearer
token unless a route opts out.

Basic usage::

    from wren import Redirect, define_routes, get, post, serve

    show_user = get("/users/:id", {"id": int}).with_action(
        lambda path_params, principal: {"id": path_params.id, "viewer": principal.id}
    )
    create_user = post("/users").with_body_schema({"name": str}).with_action(
        lambda body: {"name": body.name}
    )
    done = get("/done").with_auth_disabled().with_action(
        lambda: Redirect("https://example.com/done")
    )

    routes = define_routes(
        "accounts",
        {"/users/:id": {"GET": show_user}, "/users": {"POST": create_user}, "/done": {"GET": done}},
    )
    serve(routes)
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "AuthConfig",
    "AuthenticationError",
    "Authenticator",
    "CORSConfig",
    "ConfigurationError",
    "DataAccess",
    "DataAccessConfig",
    "HTTPError",
    "MethodNotAllowed",
    "ParseError",
    "Principal",
    "Redirect",
    "Request",
    "Response",
    "RouteDescriptor",
    "RouteTable",
    "SigningKeyCache",
    "ValidationError",
    "WrenError",
    "define_routes",
    "delete",
    "get",
    "json_response",
    "patch",
    "post",
    "put",
    "route",
    "serve",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name in ("App", "serve"):
        from wren import app as _app

        return getattr(_app, name)

    if name == "AppConfig":
        from wren.config import AppConfig

        return AppConfig

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name in ("Response", "Redirect", "json_response"):
        from wren.http import response as _resp

        return getattr(_resp, name)

    if name in (
        "RouteDescriptor",
        "RouteTable",
        "define_routes",
        "delete",
        "get",
        "patch",
        "post",
        "put",
        "route",
    ):
        from wren import routing as _routing

        return getattr(_routing, name)

    if name in ("AuthConfig", "Authenticator", "Principal", "SigningKeyCache", "CORSConfig"):
        from wren import middleware as _mw

        return getattr(_mw, name)

    if name in ("DataAccess", "DataAccessConfig"):
        from wren import data as _data

        return getattr(_data, name)

    if name in (
        "AuthenticationError",
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "ParseError",
        "ValidationError",
        "WrenError",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
