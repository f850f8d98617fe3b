"""The wren application — one function namespace served over ASGI."""

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren.config import AppConfig
from wren.data import DataAccess
from wren.errors import ConfigurationError
from wren.middleware.auth import AuthConfig, Authenticator
from wren.middleware.cors import CORSConfig
from wren.routing.table import RouteTable
from wren.server.dispatcher import Dispatcher, handle_request

logger = logging.getLogger("wren.server")


def _single_table(routes: Mapping[str, RouteTable] | RouteTable) -> RouteTable:
    if isinstance(routes, RouteTable):
        table = routes
    else:
        if len(routes) > 1:
            msg = f"Only one function name is allowed, got: {', '.join(routes)}"
            raise ConfigurationError(msg)
        if not routes:
            msg = "At least one function name is required."
            raise ConfigurationError(msg)
        table = next(iter(routes.values()))
    if len(table) == 0:
        msg = "At least one route is required."
        raise ConfigurationError(msg)
    return table


def _wants_admin(action: Callable[..., Any]) -> bool:
    try:
        return "admin" in inspect.signature(action).parameters
    except (TypeError, ValueError):
        return False


class App:
    """Serves the routes of one function.

    Created once at startup with the table from ``define_routes``; the
    routes, authenticator, and data-store handles are fixed from then on.

    Usage::

        routes = define_routes("accounts", {"/users/:id": {"GET": show_user}})
        app = App(routes, AppConfig.from_env())
        app.run()

    Collaborators not passed explicitly are built from *config*: an
    ``Authenticator`` when ``auth_issuer`` is set, ``DataAccess`` when
    ``data_url`` is set.
    """

    __slots__ = (
        "_dispatcher",
        "_shutdown_hooks",
        "_started",
        "_startup_hooks",
        "config",
    )

    def __init__(
        self,
        routes: Mapping[str, RouteTable] | RouteTable,
        config: AppConfig | None = None,
        *,
        authenticator: Authenticator | None = None,
        data_access: DataAccess | None = None,
        cors: CORSConfig | None = None,
    ) -> None:
        self.config = config or AppConfig()
        table = _single_table(routes)

        if data_access is None:
            data_access = DataAccess.from_app_config(self.config)
        if authenticator is None:
            auth_config = AuthConfig.from_app_config(self.config)
            if auth_config is not None:
                authenticator = Authenticator(auth_config, data_access=data_access)
        else:
            authenticator.bind_data_access(data_access)

        for descriptor in table:
            if not descriptor.auth_disabled and authenticator is None:
                msg = (
                    f"Route {descriptor.name} requires authentication; set "
                    "WREN_AUTH_ISSUER or pass an authenticator"
                )
                raise ConfigurationError(msg)
            if _wants_admin(descriptor.action) and (data_access is None or not data_access.has_admin):
                msg = (
                    f"Route {descriptor.name} asks for 'admin'; set WREN_DATA_URL "
                    "and WREN_DATA_SERVICE_KEY or pass a data_access with a service key"
                )
                raise ConfigurationError(msg)
            if not descriptor.has_action:
                logger.warning("Route %s has no action attached", descriptor.name)

        self._dispatcher = Dispatcher(
            table,
            authenticator=authenticator,
            data_access=data_access,
            cors=cors or CORSConfig(allow_origin=self.config.cors_origin),
        )
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._started = False

    def __repr__(self) -> str:
        return f"App({self.namespace!r}, {len(self.routes)} routes)"

    @property
    def namespace(self) -> str:
        return self._dispatcher.routes.namespace

    @property
    def routes(self) -> RouteTable:
        return self._dispatcher.routes

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_started()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator.

        Hooks run in registration order during ASGI lifespan shutdown,
        before the app closes its HTTP clients.
        """
        self._check_not_started()
        self._shutdown_hooks.append(func)
        return func

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app with uvicorn until interrupted."""
        from wren.server.dev import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            log_level=self.config.effective_log_level,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return
        if scope["type"] != "http":
            return
        self._started = True
        await handle_request(scope, receive, send, dispatcher=self._dispatcher)

    async def _handle_lifespan(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                self._started = True
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def startup(self) -> None:
        for hook in self._startup_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    async def shutdown(self) -> None:
        """Run shutdown hooks, then close the key-cache and data-store clients."""
        for hook in self._shutdown_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result
        if self._dispatcher.authenticator is not None:
            await self._dispatcher.authenticator.aclose()
        if self._dispatcher.data_access is not None:
            await self._dispatcher.data_access.aclose()

    def _check_not_started(self) -> None:
        if self._started:
            msg = "Cannot register hooks after the app has started serving."
            raise RuntimeError(msg)


def serve(
    routes: Mapping[str, RouteTable] | RouteTable,
    config: AppConfig | None = None,
    **kwargs: Any,
) -> None:
    """Build an :class:`App` and serve it.

    *config* defaults to ``AppConfig.from_env()``; keyword arguments are
    passed to ``App``.
    """
    App(routes, config or AppConfig.from_env(), **kwargs).run()
