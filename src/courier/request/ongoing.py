"""OngoingRequest protocol.

The transport implements this for every inbound request: it exposes the
abstract ``Request`` and takes exactly one reply.
"""

from typing import Protocol

from courier.http.request import Request
from courier.http.response import Response


class OngoingRequest(Protocol):
    """A request waiting for its reply."""

    @property
    def request(self) -> Request: ...

    def reply(self, response: Response) -> None: ...

    def drop(self) -> None:
        """Give up on the request without replying."""
        ...

    @property
    def is_expired(self) -> bool: ...
