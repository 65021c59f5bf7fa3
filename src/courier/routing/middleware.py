"""Handler shapes and the Middleware composition algebra.

A handler takes a ``RequestContext`` and produces a value, either directly
(sync) or as an awaitable (async). A middleware is any callable from one
handler to another::

    def timing(inner: AsyncHandler[Response]) -> AsyncHandler[Response]:
        async def handler(ctx: RequestContext) -> Response:
            start = time.monotonic()
            response = await inner(ctx)
            return response.with_header("X-Time", f"{time.monotonic() - start:.3f}")
        return handler

No base class required. ``Middleware`` only adds composition on top of a
plain function: ``Middleware(a).and_then(b)(h) == b(a(h))``.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
from collections.abc import Awaitable, Callable
from typing import Any

from courier.context import RequestContext

type SyncHandler[T] = Callable[[RequestContext], T]
type AsyncHandler[T] = Callable[[RequestContext], Awaitable[T]]
type FutureHandler[T] = Callable[
    [RequestContext], concurrent.futures.Future[T] | asyncio.Future[T]
]


class Middleware[H, T]:
    """A pure transform from one handler shape to another.

    Wraps a function ``H -> T`` and composes sequentially::

        chain = Middleware(auto_serialize).and_then(http_payload_semantics)
        handler = chain(my_handler)
    """

    __slots__ = ("_func",)

    def __init__(self, func: Callable[[H], T]) -> None:
        self._func = func

    def __call__(self, handler: H) -> T:
        return self._func(handler)

    def and_then[K](self, other: Callable[[T], K]) -> Middleware[H, K]:
        """Compose: apply this middleware first, then *other*."""

        def composed(handler: H) -> K:
            return other(self(handler))

        return Middleware(composed)

    def __repr__(self) -> str:
        name = getattr(self._func, "__qualname__", repr(self._func))
        return f"Middleware({name})"


def compose(*middlewares: Callable[[Any], Any]) -> Middleware[Any, Any]:
    """Chain *middlewares* left to right. No middlewares is the identity."""
    result: Middleware[Any, Any] = Middleware(lambda handler: handler)
    for middleware in middlewares:
        result = result.and_then(middleware)
    return result


def sync_to_async[T](handler: SyncHandler[T]) -> AsyncHandler[T]:
    """Lift a synchronous handler into one returning an already-finished awaitable.

    The wrapped handler runs without suspending; an exception it raises
    surfaces when the awaitable is awaited, like any async failure.
    """

    async def invoke(ctx: RequestContext) -> T:
        return handler(ctx)

    invoke.__wrapped__ = handler  # type: ignore[attr-defined]
    return invoke


def future_to_async[T](handler: FutureHandler[T]) -> AsyncHandler[T]:
    """Bridge a future-returning handler to the async handler contract.

    Accepts ``concurrent.futures.Future`` (e.g. from an executor) and
    ``asyncio.Future``. Success and failure both propagate unchanged;
    a cancelled future surfaces as cancellation. Requires a running
    asyncio event loop.
    """

    async def invoke(ctx: RequestContext) -> T:
        return await asyncio.wrap_future(handler(ctx))

    invoke.__wrapped__ = handler  # type: ignore[attr-defined]
    return invoke
