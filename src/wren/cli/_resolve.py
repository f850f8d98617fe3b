"""Import resolution — ``"module:attribute"`` strings to apps or route tables.

The attribute may be an ``App``, a ``define_routes()`` result, a
``RouteTable``, or a zero-argument factory returning one of those.
"""

import importlib
from collections.abc import Mapping

from wren.app import App
from wren.config import AppConfig
from wren.routing.table import RouteTable


def resolve_target(import_string: str) -> App | RouteTable:
    """Resolve *import_string* to an ``App`` or a single ``RouteTable``.

    When the attribute portion is omitted, defaults to ``"app"``.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the object is neither an app nor routes.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "app"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    if callable(obj) and not isinstance(obj, (App, RouteTable)):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if isinstance(obj, (App, RouteTable)):
        return obj
    if isinstance(obj, Mapping) and len(obj) == 1:
        (table,) = obj.values()
        if isinstance(table, RouteTable):
            return table

    msg = (
        f"{import_string!r} resolved to {type(obj).__name__}, "
        "not a wren.App or a single-function route table"
    )
    raise TypeError(msg)


def resolve_app(import_string: str) -> App:
    """Like :func:`resolve_target`, wrapping bare routes in ``App`` configured from the environment."""
    target = resolve_target(import_string)
    if isinstance(target, App):
        return target
    return App(target, AppConfig.from_env())
