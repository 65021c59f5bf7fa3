"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. The payload is whatever the
handler produced until a serializing middleware turns it into bytes.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from courier.http.headers import Headers
from courier.http.status import OK, Status


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations."""

    status: Status = OK
    headers: Headers = field(default_factory=Headers)
    payload: Any = None

    # -- Constructors --

    @classmethod
    def ok(cls) -> Response:
        return cls()

    @classmethod
    def for_status(cls, status: Status | int) -> Response:
        if isinstance(status, int):
            status = Status.of(status)
        return cls(status=status)

    @classmethod
    def for_payload(cls, payload: Any) -> Response:
        return cls(payload=payload)

    @classmethod
    def of(cls, status: Status | int, payload: Any) -> Response:
        return cls.for_status(status).with_payload(payload)

    # -- Chainable transformations --

    def with_status(self, status: Status | int) -> Response:
        """Return a new Response with a different status."""
        if isinstance(status, int):
            status = Status.of(status)
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response where *name* is set to *value*.

        Any existing value for the same (case-insensitive) name is replaced.
        """
        return replace(self, headers=self.headers.replacing(name, value))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Return a new Response with every header in *headers* set."""
        return replace(self, headers=self.headers.updating(headers))

    def with_payload(self, payload: Any) -> Response:
        """Return a new Response carrying *payload* (``None`` removes it)."""
        return replace(self, payload=payload)

    # -- Accessors --

    def header(self, name: str) -> str | None:
        """Return the value of header *name*, or ``None``."""
        return self.headers.get(name)
