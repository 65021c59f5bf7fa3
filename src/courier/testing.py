"""Test doubles for code built on courier.

- ``RecordingRequest``: an ``OngoingRequest`` that records replies and
  lets a test wait for the first one.
- ``DeferredEndpoint``: an endpoint whose completion the test controls.

Usage::

    endpoint = DeferredEndpoint()
    ongoing = RecordingRequest(Request.for_uri("/x"))
    dispatcher.handle(ongoing, RequestContext.create(ongoing.request), endpoint)
    assert ongoing.replies == []
    endpoint.complete(Response.ok())
    response = await ongoing.wait_for_reply()
"""

from __future__ import annotations

from typing import Any

import anyio

from courier.context import RequestContext
from courier.dispatch.endpoint import EndpointInfo
from courier.http.request import Request
from courier.http.response import Response


class RecordingRequest:
    """An ongoing request that remembers every reply it receives."""

    def __init__(self, request: Request, *, expired: bool = False) -> None:
        self._request = request
        self._expired = expired
        self._replied: anyio.Event | None = None
        self.replies: list[Response] = []
        self.dropped = False

    @property
    def request(self) -> Request:
        return self._request

    @property
    def is_expired(self) -> bool:
        return self._expired

    def reply(self, response: Response) -> None:
        self.replies.append(response)
        if self._replied is not None:
            self._replied.set()

    def drop(self) -> None:
        self.dropped = True

    @property
    def reply_count(self) -> int:
        return len(self.replies)

    @property
    def response(self) -> Response:
        """The first reply. Fails if there is none yet."""
        assert self.replies, "no reply recorded"
        return self.replies[0]

    async def wait_for_reply(self, timeout: float = 1.0) -> Response:
        if not self.replies:
            if self._replied is None:
                self._replied = anyio.Event()
            with anyio.fail_after(timeout):
                await self._replied.wait()
        return self.response


class DeferredEndpoint:
    """An endpoint that stays pending until ``complete`` or ``fail`` is called."""

    def __init__(self, uri: str = "/deferred", method: str = "GET") -> None:
        self._info = EndpointInfo(uri=uri, method=method, handler_name="invoke")
        self._done: anyio.Event | None = None
        self._settled = False
        self._outcome: tuple[Any, BaseException | None] = (None, None)
        self.invocations: list[RequestContext] = []

    @property
    def info(self) -> EndpointInfo:
        return self._info

    async def _wait(self) -> Any:
        if not self._settled:
            await self._event().wait()
        value, error = self._outcome
        if error is not None:
            raise error
        return value

    def _event(self) -> anyio.Event:
        # one event shared by every pending invocation
        if self._done is None:
            self._done = anyio.Event()
        return self._done

    def invoke(self, ctx: RequestContext) -> Any:
        self.invocations.append(ctx)
        return self._wait()

    def complete(self, value: Any) -> None:
        self._settle((value, None))

    def fail(self, error: BaseException) -> None:
        self._settle((None, error))

    def _settle(self, outcome: tuple[Any, BaseException | None]) -> None:
        self._outcome = outcome
        self._settled = True
        if self._done is not None:
            self._done.set()
