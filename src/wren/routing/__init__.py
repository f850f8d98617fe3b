"""Routing — route patterns, descriptors, and per-namespace route tables.

Descriptors are built at import time and grouped with ``define_routes``;
the resulting table is read-only for the lifetime of the process.
"""

from wren.routing.pattern import PathMatch, match_path, normalize_path, parse_pattern
from wren.routing.route import (
    RouteDescriptor,
    delete,
    get,
    not_implemented,
    patch,
    post,
    put,
    route,
)
from wren.routing.table import FunctionRoutes, ResolvedRoute, RouteTable, define_routes

__all__ = [
    "FunctionRoutes",
    "PathMatch",
    "ResolvedRoute",
    "RouteDescriptor",
    "RouteTable",
    "define_routes",
    "delete",
    "get",
    "match_path",
    "normalize_path",
    "not_implemented",
    "parse_pattern",
    "patch",
    "post",
    "put",
    "route",
]
