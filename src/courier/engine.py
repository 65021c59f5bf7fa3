"""RoutingEngine: the route collection application setup code writes to.

Open while the service initialises, sealed the first time the routing
table is read. Registration after that raises
``EngineAlreadyFinalizedError``, every time: it almost always means
routes are being registered outside of application setup.

Thread safety:
    Registration and sealing hold the same lock, so a registration racing
    ``endpoint_objects()`` either lands in the snapshot or fails. Once
    sealed, the snapshot is an immutable tuple.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import Any, Self

from courier.config import RoutingConfig
from courier.dispatch.endpoint import Endpoint, route_to_rule
from courier.errors import EngineAlreadyFinalizedError
from courier.http.response import Response
from courier.routing.application_router import ApplicationRouter, RuleRouter
from courier.routing.composite import ApplicationOrMetaRouter
from courier.routing.middleware import AsyncHandler
from courier.routing.middlewares import defaults
from courier.routing.route import Route, RouteProvider

logger = logging.getLogger("courier.engine")


class RoutingEngine:
    """Append-only, seal-once collection of routes.

    Usage::

        engine = RoutingEngine()
        engine.register_route(Route.sync("GET", "/ping", lambda ctx: "pong"))
        router = engine.build_router()
    """

    __slots__ = ("_built", "_lock", "_routes", "_snapshot")

    def __init__(self) -> None:
        self._routes: list[Route[AsyncHandler[Response]]] = []
        self._snapshot: tuple[Route[AsyncHandler[Response]], ...] = ()
        self._built: bool = False
        self._lock: threading.Lock = threading.Lock()

    # -- Registration --

    def register_route(self, route: Route[AsyncHandler[Any]]) -> Self:
        """Register *route* with the default middleware chain applied."""
        self._register([route.with_middleware(defaults())])
        return self

    def register_routes(self, routes: Iterable[Route[AsyncHandler[Any]]] | RouteProvider) -> Self:
        """Register routes (or a provider's routes) with default middleware.

        The batch is registered whole or not at all.
        """
        chain = defaults()
        self._register([route.with_middleware(chain) for route in _routes_of(routes)])
        return self

    def register_safe_route(self, route: Route[AsyncHandler[Response]]) -> Self:
        """Register a route whose handler already returns wire-ready responses."""
        self._register([route])
        return self

    def register_safe_routes(
        self, routes: Iterable[Route[AsyncHandler[Response]]] | RouteProvider
    ) -> Self:
        self._register(list(_routes_of(routes)))
        return self

    # -- Finalization --

    def endpoint_objects(self) -> tuple[Route[AsyncHandler[Response]], ...]:
        """Seal the engine and return every registered route."""
        with self._lock:
            if not self._built:
                self._snapshot = tuple(self._routes)
                self._built = True
            return self._snapshot

    @property
    def is_built(self) -> bool:
        return self._built

    def build_router(
        self,
        meta_router: ApplicationRouter[Endpoint] | None = None,
        config: RoutingConfig | None = None,
    ) -> ApplicationRouter[Endpoint]:
        """Seal the engine and compile its routes.

        With a *meta_router*, the result dispatches meta paths to it.
        """
        config = config or RoutingConfig()
        router: ApplicationRouter[Endpoint] = RuleRouter.of(
            (route_to_rule(route) for route in self.endpoint_objects()),
            optional_trailing_slash=config.optional_trailing_slash,
        )
        if meta_router is not None:
            router = ApplicationOrMetaRouter(router, meta_router, config.meta_prefix)
        return router

    # -- Internal --

    def _register(self, batch: list[Route[AsyncHandler[Response]]]) -> None:
        with self._lock:
            self._check_not_built()
            for route in batch:
                logger.info("Registering Route %s (%s)", route.uri, route.method)
            self._routes.extend(batch)

    def _check_not_built(self) -> None:
        if self._built:
            raise EngineAlreadyFinalizedError()


def _routes_of(routes: Iterable[Route[Any]] | RouteProvider) -> Iterable[Route[Any]]:
    routes_method = getattr(routes, "routes", None)
    if callable(routes_method):
        return routes_method()
    return routes  # type: ignore[return-value]
