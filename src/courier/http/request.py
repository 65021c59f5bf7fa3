"""Immutable HTTP request.

The transport layer hands courier an abstract request: method, URI,
headers, the calling service (if it identified itself) and an optional
payload. Nothing here touches the wire.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from urllib.parse import parse_qs, urlsplit

from courier.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``service`` is the origin service identifier supplied by the
    transport. It drives caller classification for error disclosure.
    """

    method: str
    uri: str
    headers: Headers = field(default_factory=Headers)
    service: str | None = None
    payload: bytes | None = None

    @classmethod
    def for_uri(cls, uri: str, method: str = "GET") -> Request:
        return cls(method=method, uri=uri)

    # -- Computed properties --

    @property
    def path(self) -> str:
        """The raw (still percent-encoded) path of the URI.

        Raises ``ValueError`` if the URI cannot be split.
        """
        return urlsplit(self.uri).path

    @property
    def parameters(self) -> dict[str, list[str]]:
        """Query string parameters, every value kept."""
        return parse_qs(urlsplit(self.uri).query, keep_blank_values=True)

    def parameter(self, name: str) -> str | None:
        """Return the first value of query parameter *name*, if any."""
        values = self.parameters.get(name)
        return values[0] if values else None

    def header(self, name: str) -> str | None:
        return self.headers.get(name)

    # -- Chainable transformations --

    def with_uri(self, uri: str) -> Request:
        return replace(self, uri=uri)

    def with_service(self, service: str | None) -> Request:
        return replace(self, service=service)

    def with_header(self, name: str, value: str) -> Request:
        return replace(self, headers=self.headers.replacing(name, value))

    def with_headers(self, headers: Mapping[str, str]) -> Request:
        return replace(self, headers=self.headers.updating(headers))

    def with_payload(self, payload: bytes | None) -> Request:
        return replace(self, payload=payload)
