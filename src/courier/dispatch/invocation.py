"""Endpoint invocation: fire the handler, reply when it completes.

``EndpointInvocationHandler.handle`` never waits for the endpoint. It
calls ``endpoint.invoke`` (so a handler that raises synchronously is
caught right there), hands the resulting awaitable to an anyio task
group, and returns. The task observes the completion exactly once and
replies on the ongoing request:

- completed with a response  -> reply with it verbatim
- completed with an error    -> unwrap one wrapper level, reply 500
- completed with ``None``    -> invariant violation, logged, reply 500

How much of the error reaches the caller depends on who the caller is.
Internal callers (origin service in ``RoutingConfig.trusted_services``)
get the exception message in the reason phrase; everyone else gets a
bare ``500 Internal Server Error``. Every failure is logged at warning
with the full request, whatever the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from enum import Enum
from typing import Any

from anyio.abc import TaskGroup

from courier.config import RoutingConfig
from courier.context import RequestContext, request_var
from courier.dispatch.endpoint import Endpoint
from courier.errors import CompletionError, IllegalStateError
from courier.http.request import Request
from courier.http.response import Response
from courier.http.status import INTERNAL_SERVER_ERROR
from courier.request.ongoing import OngoingRequest

logger = logging.getLogger("courier.dispatch")


class CallerTrust(Enum):
    """How much diagnostic detail a caller may see."""

    INTERNAL = "internal"
    EXTERNAL = "external"


def classify_caller(request: Request, trusted_services: Iterable[str]) -> CallerTrust:
    """Classify *request* by the origin service the transport reported."""
    if request.service is not None and request.service in set(trusted_services):
        return CallerTrust.INTERNAL
    return CallerTrust.EXTERNAL


def unwrap(exc: BaseException) -> BaseException:
    """Strip one level of generic completion wrapper, if present.

    A ``CompletionError`` yields its cause; an exception group holding a
    single exception (what a task group raises) yields that exception.
    """
    if isinstance(exc, CompletionError) and exc.__cause__ is not None:
        return exc.__cause__
    if isinstance(exc, BaseExceptionGroup) and len(exc.exceptions) == 1:
        return exc.exceptions[0]
    return exc


def error_response(exc: BaseException, trust: CallerTrust) -> Response:
    """Build the 500 reply for *exc*, disclosing its message only to internal callers."""
    status = INTERNAL_SERVER_ERROR
    message = str(exc)
    if trust is CallerTrust.INTERNAL and message:
        status = status.with_reason_phrase(f'{status.reason_phrase}: "{message}"')
    return Response.for_status(status)


class EndpointInvocationHandler:
    """Non-blocking endpoint dispatcher.

    Usage::

        async with anyio.create_task_group() as tg:
            dispatcher = EndpointInvocationHandler(tg)
            dispatcher.handle(ongoing, ctx, endpoint)  # returns immediately
    """

    __slots__ = ("_task_group", "_trusted_services")

    def __init__(self, task_group: TaskGroup, config: RoutingConfig | None = None) -> None:
        self._task_group = task_group
        self._trusted_services = frozenset((config or RoutingConfig()).trusted_services)

    def create(
        self, ongoing: OngoingRequest, ctx: RequestContext, endpoint: Endpoint
    ) -> Callable[[], None]:
        """Return a zero-argument callable that dispatches when run."""
        return lambda: self.handle(ongoing, ctx, endpoint)

    def handle(self, ongoing: OngoingRequest, ctx: RequestContext, endpoint: Endpoint) -> None:
        """Fire off the invocation. Likely returns before the endpoint finishes."""
        token = request_var.set(ctx.request)
        try:
            try:
                pending = endpoint.invoke(ctx)
            except Exception as exc:
                self._handle_exception(exc, ongoing)
                return
            self._task_group.start_soon(
                self._complete, ongoing, pending, name=f"courier-invoke {endpoint.info.name}"
            )
        finally:
            request_var.reset(token)

    async def _complete(self, ongoing: OngoingRequest, pending: Awaitable[Any]) -> None:
        try:
            try:
                response = await pending
            except Exception as exc:
                self._handle_exception(unwrap(exc), ongoing)
                return

            if response is not None:
                ongoing.reply(response)
            else:
                logger.error(
                    "Both response and exception missing for request %s - this shouldn't happen!",
                    ongoing.request,
                )
                self._handle_exception(
                    IllegalStateError("Both response and exception missing"), ongoing
                )
        except Exception:
            # don't try to respond here; just log the fact that responding failed
            logger.exception("Exception caught when replying")

    def _handle_exception(self, exc: BaseException, ongoing: OngoingRequest) -> None:
        request = ongoing.request
        trust = classify_caller(request, self._trusted_services)
        logger.warning(
            "Got exception %r when invoking endpoint for request: %s",
            str(exc),
            request,
            exc_info=exc,
        )
        ongoing.reply(error_response(exc, trust))
