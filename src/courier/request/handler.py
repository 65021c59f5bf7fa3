"""Request handling: match, then dispatch.

1. match the request against the application router
2. reply directly for bad URIs (400), unknown paths (404), and wrong
   methods (405, or 204 for OPTIONS), with an ``Allow`` header
3. build the ``RequestContext`` from the match
4. hand the endpoint to the invocation handler, which replies later
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from courier.context import RequestContext
from courier.dispatch.endpoint import Endpoint
from courier.dispatch.invocation import EndpointInvocationHandler
from courier.errors import InvalidUriError
from courier.http.response import Response
from courier.http.status import (
    BAD_REQUEST,
    INTERNAL_SERVER_ERROR,
    METHOD_NOT_ALLOWED,
    NO_CONTENT,
    NOT_FOUND,
)
from courier.request.ongoing import OngoingRequest
from courier.routing.application_router import ApplicationRouter
from courier.routing.rule import RuleMatch

logger = logging.getLogger("courier.request")

type MatchContinuation = Callable[[OngoingRequest, RuleMatch[Endpoint]], None]


def allow_header(methods: frozenset[str]) -> str:
    """``Allow`` header value: sorted methods, always including OPTIONS."""
    return ", ".join(sorted(methods | {"OPTIONS"}))


class RequestRunnable:
    """Routes one ongoing request and continues with the match, if any."""

    __slots__ = ("_ongoing", "_router")

    def __init__(self, ongoing: OngoingRequest, router: ApplicationRouter[Endpoint]) -> None:
        self._ongoing = ongoing
        self._router = router

    def run(self, continuation: MatchContinuation) -> None:
        try:
            self._match_and_run(continuation)
        except Exception:
            logger.exception("Exception when handling request")
            # ensure that we reply with a server error, if possible
            self._ongoing.reply(Response.for_status(INTERNAL_SERVER_ERROR))

    def _match_and_run(self, continuation: MatchContinuation) -> None:
        request = self._ongoing.request
        try:
            match = self._router.match(request)
        except InvalidUriError as exc:
            logger.warning("bad uri %s %s %s", request.method, request.uri, BAD_REQUEST, exc_info=exc)
            self._ongoing.reply(Response.for_status(BAD_REQUEST))
            return

        if match is None:
            self._reply_no_match()
            return

        continuation(self._ongoing, match)

    def _reply_no_match(self) -> None:
        request = self._ongoing.request
        methods = frozenset(self._router.methods_for_valid_rules(request))
        if not methods:
            logger.warning("not found %s %s %s", request.method, request.uri, NOT_FOUND)
            self._ongoing.reply(Response.for_status(NOT_FOUND))
            return

        if request.method == "OPTIONS":
            status = NO_CONTENT
        else:
            status = METHOD_NOT_ALLOWED
            logger.warning("wrong method %s %s %s", request.method, request.uri, status)
        self._ongoing.reply(Response.for_status(status).with_header("Allow", allow_header(methods)))


class RequestHandler:
    """Entry point the transport calls for every inbound request.

    Usage::

        async with anyio.create_task_group() as tg:
            handler = RequestHandler(router, EndpointInvocationHandler(tg))
            handler.handle(ongoing)
    """

    __slots__ = ("_invocation_handler", "_router")

    def __init__(
        self,
        router: ApplicationRouter[Endpoint],
        invocation_handler: EndpointInvocationHandler,
    ) -> None:
        self._router = router
        self._invocation_handler = invocation_handler

    def handle(self, ongoing: OngoingRequest) -> None:
        try:
            RequestRunnable(ongoing, self._router).run(self._handle_endpoint_match)
        except Exception:
            logger.exception("Request matching/handling threw exception")
            try:
                ongoing.reply(Response.for_status(INTERNAL_SERVER_ERROR))
            except Exception:
                logger.exception("Caught exception when replying with Internal Server Error")

    def _handle_endpoint_match(self, ongoing: OngoingRequest, match: RuleMatch[Endpoint]) -> None:
        endpoint = match.rule.target
        ctx = RequestContext.create(ongoing.request, match.parsed_path_arguments())
        self._invocation_handler.handle(ongoing, ctx, endpoint)
