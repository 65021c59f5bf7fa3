"""Route and DocString frozen dataclasses, and the RouteProvider protocol.

A Route describes one endpoint: method, URI pattern, handler and optional
documentation. It is created during setup and never mutated; every
``with_*`` call returns a new Route.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from typing import Any, Protocol

from courier.routing.middleware import (
    AsyncHandler,
    FutureHandler,
    SyncHandler,
    future_to_async,
    sync_to_async,
)


@dataclass(frozen=True, slots=True)
class DocString:
    """Human-readable documentation for a route."""

    summary: str
    description: str


@dataclass(frozen=True, slots=True)
class Route[H]:
    """A frozen route definition.

    ``handler`` is polymorphic: a sync handler, an async handler, or
    whatever a middleware turned it into. Routes registered with the
    routing engine must end up as async handlers of ``Response``.
    """

    method: str
    uri: str
    handler: H
    doc_string: DocString | None = None

    # -- Factories --

    @classmethod
    def create(
        cls, method: str, uri: str, handler: H, doc_string: DocString | None = None
    ) -> Route[H]:
        return cls(method=method, uri=uri, handler=handler, doc_string=doc_string)

    @staticmethod
    def sync[T](method: str, uri: str, handler: SyncHandler[T]) -> Route[AsyncHandler[T]]:
        """A route for a synchronous handler, lifted to the async contract."""
        return Route.create(method, uri, handler).with_middleware(sync_to_async)

    @staticmethod
    def async_[T](method: str, uri: str, handler: AsyncHandler[T]) -> Route[AsyncHandler[T]]:
        return Route.create(method, uri, handler)

    @staticmethod
    def future[T](method: str, uri: str, handler: FutureHandler[T]) -> Route[AsyncHandler[T]]:
        """A route for a handler returning a future, bridged to the async contract."""
        return Route.create(method, uri, handler).with_middleware(future_to_async)

    @staticmethod
    def with_[A, K](
        middleware: Callable[[A], K], method: str, uri: str, handler: A
    ) -> Route[K]:
        """Same as ``Route.create(method, uri, handler).with_middleware(middleware)``."""
        return Route.create(method, uri, middleware(handler))

    # -- Chainable transformations --

    def copy[K](
        self, method: str, uri: str, handler: K, doc_string: DocString | None
    ) -> Route[K]:
        return Route(method=method, uri=uri, handler=handler, doc_string=doc_string)

    def with_handler[K](self, handler: K) -> Route[K]:
        return self.copy(self.method, self.uri, handler, self.doc_string)

    def with_doc_string(self, summary: str, description: str) -> Route[H]:
        return replace(self, doc_string=DocString(summary, description))

    def with_middleware[K](self, middleware: Callable[[H], K]) -> Route[K]:
        """Return a new Route whose handler is ``middleware(self.handler)``."""
        return self.copy(self.method, self.uri, middleware(self.handler), self.doc_string)

    def with_prefix(self, prefix: str) -> Route[H]:
        return replace(self, uri=prefix + self.uri)


class RouteProvider(Protocol):
    """Anything that can hand over a batch of routes.

    Routes from a provider get the default middleware chain applied when
    registered.
    """

    def routes(self) -> Iterable[Route[Any]]: ...
