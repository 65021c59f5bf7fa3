"""Request context handed to every handler, plus a ContextVar for the
current request.

``request_var`` is set by the dispatcher while an endpoint is invoked.
Tasks spawned for the completion inherit a copy of it, so logging and
handler code running later for the same request still see it.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local otherwise.
    No locks needed.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field

from courier.http.request import Request


@dataclass(frozen=True, slots=True)
class RequestMetadata:
    """Transport-level facts about a request. All optional."""

    protocol: str | None = None
    local_address: tuple[str, int] | None = None
    remote_address: tuple[str, int] | None = None


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Everything a handler gets: the request and its extracted path args."""

    request: Request
    path_args: Mapping[str, str] = field(default_factory=dict)
    arrival_time: float = field(default_factory=time.monotonic)
    metadata: RequestMetadata = field(default_factory=RequestMetadata)

    @classmethod
    def create(
        cls,
        request: Request,
        path_args: Mapping[str, str] | None = None,
        metadata: RequestMetadata | None = None,
    ) -> RequestContext:
        return cls(
            request=request,
            path_args=dict(path_args or {}),
            metadata=metadata or RequestMetadata(),
        )

    def path_arg(self, name: str) -> str | None:
        return self.path_args.get(name)


request_var: ContextVar[Request] = ContextVar("courier_request")
"""The request currently being dispatched."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a dispatch.
    """
    return request_var.get()
