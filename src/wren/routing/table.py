"""Route table for one function namespace.

Every route of a function is mounted under ``/<namespace>``: a descriptor
for ``/users/:id`` in namespace ``accounts`` answers ``/accounts/users/42``.

Resolution scans routes in registration order and returns the first one
whose method and pattern both match. Overlapping patterns are resolved by
that order, not by specificity.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from wren.errors import ConfigurationError, MethodNotAllowed
from wren.routing.pattern import match_path, normalize_path
from wren.routing.route import RouteDescriptor

type RoutesByPath = Mapping[str, Mapping[str, RouteDescriptor]]
type FunctionRoutes = Mapping[str, RouteTable]


@dataclass(frozen=True, slots=True)
class ResolvedRoute:
    """A descriptor and the raw path parameters it captured."""

    descriptor: RouteDescriptor
    path_params: dict[str, str]


class RouteTable:
    """Ordered, read-only routes for one namespace.

    Usage::

        table = RouteTable("accounts", [show_user, create_user])
        resolved = table.resolve("GET", "/accounts/users/42")
        resolved.path_params  # {"id": "42"}
    """

    __slots__ = ("_mounts", "_routes", "namespace")

    def __init__(self, namespace: str, routes: Iterable[RouteDescriptor]) -> None:
        name = namespace.strip("/")
        if not name or "/" in name:
            msg = f"Invalid function namespace {namespace!r}"
            raise ConfigurationError(msg)

        ordered = tuple(routes)
        seen: set[tuple[str, str]] = set()
        for descriptor in ordered:
            key = (descriptor.method, normalize_path(descriptor.path))
            if key in seen:
                msg = f"Duplicate route {descriptor.method} {descriptor.path} in {name!r}"
                raise ConfigurationError(msg)
            seen.add(key)

        self.namespace = name
        self._routes = ordered
        self._mounts = tuple(self.mount_path(descriptor) for descriptor in ordered)

    def __iter__(self) -> Iterator[RouteDescriptor]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __repr__(self) -> str:
        return f"RouteTable({self.namespace!r}, {len(self._routes)} routes)"

    def mount_path(self, descriptor: RouteDescriptor) -> str:
        """The full pattern *descriptor* answers, namespace included."""
        path = normalize_path(descriptor.path)
        if path == "/":
            return f"/{self.namespace}"
        return f"/{self.namespace}{path}"

    def resolve(self, method: str, path: str) -> ResolvedRoute:
        """Return the first route matching *method* and *path*.

        Raises ``MethodNotAllowed`` when nothing matches. Methods registered
        for a matching pattern are listed in its ``Allow`` header.
        """
        allowed: set[str] = set()
        for descriptor, mount in zip(self._routes, self._mounts, strict=True):
            match = match_path(mount, path)
            if not match:
                continue
            if descriptor.method == method:
                return ResolvedRoute(descriptor=descriptor, path_params=match.params)
            allowed.add(descriptor.method)
        raise MethodNotAllowed(frozenset(allowed))


def define_routes(
    namespace: str,
    routes_by_path: RoutesByPath,
    api: Mapping[str, Iterable[str]] | None = None,
) -> dict[str, RouteTable]:
    """Group a function's routes under *namespace*.

    *routes_by_path* maps each pattern to ``{METHOD: descriptor}``; both
    keys must agree with the descriptor they hold. When *api* (pattern →
    methods) is given, the declared and implemented routes must coincide::

        routes = define_routes(
            "accounts",
            {"/users/:id": {"GET": show_user, "PATCH": update_user}},
            api={"/users/:id": ("GET", "PATCH")},
        )
    """
    descriptors: list[RouteDescriptor] = []
    implemented: set[tuple[str, str]] = set()
    for path, by_method in routes_by_path.items():
        for method, descriptor in by_method.items():
            if method.upper() != descriptor.method:
                msg = (
                    f"Route {path!r} registers a {descriptor.method} descriptor "
                    f"under method {method!r}"
                )
                raise ConfigurationError(msg)
            if normalize_path(path) != normalize_path(descriptor.path):
                msg = f"Route key {path!r} does not match descriptor path {descriptor.path!r}"
                raise ConfigurationError(msg)
            descriptors.append(descriptor)
            implemented.add((normalize_path(path), descriptor.method))

    if api is not None:
        declared = {
            (normalize_path(path), method.upper()) for path, methods in api.items() for method in methods
        }
        missing = sorted(declared - implemented)
        extra = sorted(implemented - declared)
        if missing or extra:
            parts = []
            if missing:
                parts.append("missing " + ", ".join(f"{m} {p}" for p, m in missing))
            if extra:
                parts.append("undeclared " + ", ".join(f"{m} {p}" for p, m in extra))
            msg = f"Routes for {namespace!r} do not match the declared API: {'; '.join(parts)}"
            raise ConfigurationError(msg)

    table = RouteTable(namespace, descriptors)
    return {table.namespace: table}
