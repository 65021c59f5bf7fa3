"""Built-in middleware: serialization and HTTP payload semantics.

``defaults()`` is the chain applied to every route registered through
``RoutingEngine.register_route(s)``::

    auto_serialize  ->  http_payload_semantics

Routes registered as "safe" skip it; their handlers already produce
wire-ready ``Response`` objects with ``bytes`` payloads.
"""

from __future__ import annotations

import dataclasses
import json as json_module
from dataclasses import dataclass
from typing import Any, Protocol

from courier.context import RequestContext
from courier.http.request import Request
from courier.http.response import Response
from courier.http.status import Family, Status
from courier.routing.middleware import AsyncHandler, Middleware

CONTENT_TYPE = "Content-Type"
CONTENT_LENGTH = "Content-Length"


@dataclass(frozen=True, slots=True)
class Payload:
    """Serialized bytes and, optionally, the content type they carry."""

    data: bytes
    content_type: str | None = None


class Serializer(Protocol):
    """Turns a handler's domain object into wire bytes."""

    def serialize(self, request: Request, value: Any) -> Payload: ...


class AutoSerializer:
    """Best-effort serializer.

    - ``bytes`` / ``bytearray`` -> as is
    - ``str``                   -> UTF-8, ``text/plain; charset=utf-8``
    - dataclass instance        -> JSON of ``dataclasses.asdict``
    - anything else             -> JSON, ``application/json``

    Raises ``TypeError`` for values JSON cannot encode.
    """

    __slots__ = ()

    def serialize(self, request: Request, value: Any) -> Payload:
        match value:
            case bytes() | bytearray():
                return Payload(bytes(value))
            case str():
                return Payload(value.encode("utf-8"), "text/plain; charset=utf-8")
            case _:
                if dataclasses.is_dataclass(value) and not isinstance(value, type):
                    return _json_payload(dataclasses.asdict(value))
                return _json_payload(value)


def _json_payload(value: Any) -> Payload:
    return Payload(json_module.dumps(value).encode("utf-8"), "application/json")


def ensure_response(value: Any) -> Response:
    """Wrap a bare value in a 200 ``Response``; pass responses through."""
    if isinstance(value, Response):
        return value
    return Response.for_payload(value)


def _ensure_response_handler(inner: AsyncHandler[Any]) -> AsyncHandler[Response]:
    async def invoke(ctx: RequestContext) -> Response:
        return ensure_response(await inner(ctx))

    return invoke


def serialize(serializer: Serializer) -> Middleware[AsyncHandler[Any], AsyncHandler[Response]]:
    """Middleware applying *serializer* to the payload of the inner handler's result.

    Sets ``Content-Type`` when the serializer reports one. Responses
    without a payload pass through untouched.
    """

    def apply(inner: AsyncHandler[Any]) -> AsyncHandler[Response]:
        ensured = _ensure_response_handler(inner)

        async def invoke(ctx: RequestContext) -> Response:
            response = await ensured(ctx)
            if response.payload is None:
                return response

            payload = serializer.serialize(ctx.request, response.payload)
            if payload.content_type is not None:
                response = response.with_header(CONTENT_TYPE, payload.content_type)
            return response.with_payload(payload.data)

        return invoke

    return Middleware(apply)


def auto_serialize(inner: AsyncHandler[Any]) -> AsyncHandler[Response]:
    """Serialize whatever the handler returns with ``AutoSerializer``."""
    return serialize(AutoSerializer())(inner)


def reply_content_type(
    content_type: str,
) -> Middleware[AsyncHandler[Any], AsyncHandler[Response]]:
    """Middleware forcing the ``Content-Type`` of every reply."""

    def apply(inner: AsyncHandler[Any]) -> AsyncHandler[Response]:
        ensured = _ensure_response_handler(inner)

        async def invoke(ctx: RequestContext) -> Response:
            response = await ensured(ctx)
            return response.with_header(CONTENT_TYPE, content_type)

        return invoke

    return Middleware(apply)


# see RFC 9110 section 6.4.1: 1xx, 204 and 304 never carry content
def _payload_allowed_for_status(status: Status) -> bool:
    return status.code not in (204, 304) and status.family is not Family.INFORMATIONAL


def _payload_allowed_for_method(method: str) -> bool:
    return method.upper() != "HEAD"


def apply_http_payload_semantics(request: Request, response: Response) -> Response:
    """Set Content-Length and drop payloads the status or method forbid.

    HEAD keeps the Content-Length computed from the payload it discards.
    """
    result = response
    if _payload_allowed_for_status(response.status):
        size = len(response.payload) if response.payload is not None else 0
        result = result.with_header(CONTENT_LENGTH, str(size))

    if not _payload_allowed_for_method(request.method) or not _payload_allowed_for_status(
        response.status
    ):
        result = result.with_payload(None)

    return result


def http_payload_semantics(inner: AsyncHandler[Response]) -> AsyncHandler[Response]:
    """Make the inner handler's replies conform to HTTP payload rules."""

    async def invoke(ctx: RequestContext) -> Response:
        response = await inner(ctx)
        return apply_http_payload_semantics(ctx.request, response)

    return invoke


def defaults() -> Middleware[AsyncHandler[Any], AsyncHandler[Response]]:
    """The middleware chain applied to routes by default."""
    return Middleware(auto_serialize).and_then(http_payload_semantics)
