"""Endpoints: dispatchable units built from routes.

An Endpoint wraps a route whose handler already speaks the async
``Response`` contract, together with the metadata used to name it in
logs and metrics.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Protocol

from courier.context import RequestContext
from courier.errors import ConfigurationError
from courier.http.response import Response
from courier.routing.application_router import RuleRouter
from courier.routing.middleware import AsyncHandler
from courier.routing.middlewares import defaults
from courier.routing.route import DocString, Route
from courier.routing.rule import Rule

logger = logging.getLogger("courier.dispatch")

# RFC 3986 section 3.1: scheme = ALPHA *( ALPHA / DIGIT / "+" / "-" / "." )
_SCHEME_AND_AUTHORITY = re.compile(r"[a-zA-Z][a-zA-Z0-9+.-]*://[^/]+")


@dataclass(frozen=True, slots=True)
class EndpointInfo:
    """Descriptive metadata for an endpoint."""

    uri: str
    method: str
    handler_name: str
    doc_string: DocString | None = None

    @property
    def name(self) -> str:
        """Stable identity used for logging and metrics: ``"GET:/users"``."""
        return f"{self.method}:{self.uri}"


class Endpoint(Protocol):
    """Something the dispatcher can invoke."""

    @property
    def info(self) -> EndpointInfo: ...

    def invoke(self, ctx: RequestContext) -> Awaitable[Response]: ...


class RouteEndpoint:
    """Endpoint backed by a route with an async ``Response`` handler."""

    __slots__ = ("_handler_name", "route")

    def __init__(self, route: Route[AsyncHandler[Response]], handler_name: str = "invoke") -> None:
        self.route = route
        self._handler_name = handler_name

    @property
    def info(self) -> EndpointInfo:
        return EndpointInfo(
            uri=self.route.uri,
            method=self.route.method,
            handler_name=self._handler_name,
            doc_string=self.route.doc_string,
        )

    def invoke(self, ctx: RequestContext) -> Awaitable[Response]:
        return self.route.handler(ctx)

    def __repr__(self) -> str:
        return f"RouteEndpoint({self.info.name})"


def route_to_rule(route: Route[AsyncHandler[Response]]) -> Rule[Endpoint]:
    """Compile a route into a rule targeting a ``RouteEndpoint``.

    A ``scheme://authority`` prefix on the route URI is ignored; only the
    path takes part in matching.
    """
    relative_uri = _SCHEME_AND_AUTHORITY.sub("", route.uri, count=1)
    logger.debug("Found Route with method: %s, uri: %s", route.method, relative_uri)
    return Rule.from_uri(relative_uri, route.method, RouteEndpoint(route))


def new_router_from_inspecting(
    *objects: Any, optional_trailing_slash: bool = True
) -> RuleRouter[Endpoint]:
    """Build a router from routes and route providers.

    ``Route`` objects are used as they are. Objects with a ``routes()``
    method are treated as route providers and their routes get the
    default middleware chain. Anything else raises ``ConfigurationError``.
    """
    rules: list[Rule[Endpoint]] = []
    for obj in objects:
        if isinstance(obj, Route):
            rules.append(route_to_rule(obj))
        elif callable(getattr(obj, "routes", None)):
            chain = defaults()
            rules.extend(route_to_rule(route.with_middleware(chain)) for route in obj.routes())
        else:
            msg = f"Unknown route/rule instance detected {obj!r}"
            raise ConfigurationError(msg)
    return RuleRouter.of(rules, optional_trailing_slash=optional_trailing_slash)
