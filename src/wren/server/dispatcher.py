"""Request dispatch for one function namespace.

Each request moves through::

    OPTIONS? -> preflight
    resolve route -> authenticate (unless disabled) -> validate
    path, query, body -> invoke action -> encode outcome

Components below the dispatcher only raise; the single ``except`` in
:meth:`Dispatcher.run` turns every failure into a ``Failure`` outcome.
"""

import inspect
import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.invoke import invoke
from wren.data import DataAccess
from wren.errors import ConfigurationError
from wren.http.request import Request
from wren.http.response import Response
from wren.middleware.auth import AuthContext, Authenticator
from wren.middleware.cors import CORSConfig, preflight_response
from wren.routing.route import INJECTABLE, RouteDescriptor
from wren.routing.table import RouteTable
from wren.server.encoding import Failure, Outcome, encode_outcome, outcome_of
from wren.server.sender import send_response
from wren.validation.schema import NO_BODY, parse_body, parse_path_params, parse_query_params

logger = logging.getLogger("wren.server")


class Dispatcher:
    """Routes requests to actions and encodes the result.

    The route table and collaborators are fixed at construction and only
    read afterwards, so one dispatcher serves all concurrent requests.
    """

    __slots__ = ("authenticator", "cors", "data_access", "routes")

    def __init__(
        self,
        routes: RouteTable,
        *,
        authenticator: Authenticator | None = None,
        data_access: DataAccess | None = None,
        cors: CORSConfig | None = None,
    ) -> None:
        self.routes = routes
        self.authenticator = authenticator
        self.data_access = data_access
        self.cors = cors or CORSConfig()

    async def dispatch(self, request: Request) -> Response:
        """Handle *request* and return the response to send."""
        if request.method == "OPTIONS":
            return preflight_response(self.cors)
        outcome = await self.run(request)
        try:
            return encode_outcome(outcome, request, self.cors)
        except Exception as exc:
            # e.g. a handler value that cannot be serialized as JSON
            return encode_outcome(Failure(exc), request, self.cors)

    async def run(self, request: Request) -> Outcome:
        """Resolve, authenticate, validate, and invoke; never raises."""
        auth: AuthContext | None = None
        try:
            resolved = self.routes.resolve(request.method, request.path)
            descriptor = resolved.descriptor
            logger.info(
                "Received request for path: %s %s (%s)",
                request.method,
                request.path,
                descriptor.name,
            )
            request = replace(request, path_params=resolved.path_params)

            if not descriptor.auth_disabled:
                auth = await self._authenticate(request)

            path_params = parse_path_params(descriptor.path_schema, resolved.path_params)
            query_params = parse_query_params(descriptor.query_schema, request.query)
            body = None
            if descriptor.body_schema is not NO_BODY:
                body = parse_body(descriptor.body_schema, await request.body())

            available: dict[str, Any] = {
                "request": request,
                "path_params": path_params,
                "query_params": query_params,
                "body": body,
                "client": request.client,
            }
            if auth is not None:
                available["principal"] = auth.principal
                available["db"] = auth.db

            kwargs = self._build_kwargs(descriptor, available)
            result = await invoke(descriptor.action, **kwargs)
            return outcome_of(result)
        except Exception as exc:
            return Failure(exc)
        finally:
            if auth is not None and auth.db is not None:
                await auth.db.aclose()

    async def _authenticate(self, request: Request) -> AuthContext:
        if self.authenticator is None:
            msg = "Route requires authentication but no authenticator is configured"
            raise ConfigurationError(msg)
        return await self.authenticator.authenticate(request)

    def _admin_handle(self) -> Any:
        if self.data_access is None:
            msg = "Action asks for 'admin' but no data store is configured"
            raise ConfigurationError(msg)
        return self.data_access.admin

    def _build_kwargs(self, descriptor: RouteDescriptor, available: dict[str, Any]) -> dict[str, Any]:
        """Pick the injectable values the action's signature asks for."""
        action: Callable[..., Any] = descriptor.action
        try:
            params = inspect.signature(action).parameters
        except (TypeError, ValueError):
            return {}

        kwargs: dict[str, Any] = {}
        if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params.values()):
            kwargs.update(available)
            if self.data_access is not None and self.data_access.has_admin:
                kwargs["admin"] = self.data_access.admin
            return kwargs

        for name in params:
            if name not in INJECTABLE:
                continue
            if name == "admin":
                kwargs[name] = self._admin_handle()
            elif name in available:
                kwargs[name] = available[name]
        return kwargs


async def handle_request(scope: Scope, receive: Receive, send: Send, *, dispatcher: Dispatcher) -> None:
    """Process a single ASGI HTTP request through the dispatcher."""
    request = Request.from_asgi(scope, receive)
    response = await dispatcher.dispatch(request)
    await send_response(response, send)
