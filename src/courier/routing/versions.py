"""Versioned routes and their expansion into concrete ``/v{N}`` routes.

A VersionedRoute is valid in the half-open range ``[valid_from,
removed_in)``; with no ``removed_in`` it stays valid up to the latest
version. ``Versions`` expands a batch of them over a configured
``[start, last]`` range::

    versions = Versions.from_(0).to(2)
    engine.register_safe_routes(
        versions.expand([VersionedRoute.of(route).with_removed_in(2)])
    )
    # -> /v0/..., /v1/...

All overlaps in a batch are reported together, after expansion.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any

from courier.errors import OverlappingVersionedRoutesError, VersionRangeError
from courier.routing.route import Route


def _check_range(valid_from: int, removed_in: int | None) -> None:
    if valid_from < 0:
        msg = f"valid_from must be non-negative, got {valid_from}"
        raise VersionRangeError(msg)
    if removed_in is None:
        return
    if removed_in < 0:
        msg = f"removed_in must be non-negative, got {removed_in}"
        raise VersionRangeError(msg)
    if valid_from >= removed_in:
        msg = f"empty version range: [{valid_from}, {removed_in})"
        raise VersionRangeError(msg)


@dataclass(frozen=True, slots=True)
class VersionedRoute:
    """A route plus the API versions it is available in.

    Validated eagerly: constructing or deriving an instance with an
    empty window or a negative bound raises ``VersionRangeError``.
    """

    route: Route[Any]
    valid_from: int = 0
    removed_in: int | None = None

    def __post_init__(self) -> None:
        _check_range(self.valid_from, self.removed_in)

    @classmethod
    def of(cls, route: Route[Any]) -> VersionedRoute:
        """A versioned route valid from version 0 onwards."""
        return cls(route=route)

    def with_valid_from(self, valid_from: int) -> VersionedRoute:
        """Return a copy first valid in *valid_from*."""
        return replace(self, valid_from=valid_from)

    def with_removed_in(self, removed_in: int) -> VersionedRoute:
        """Return a copy that is no longer valid from *removed_in* on."""
        return replace(self, removed_in=removed_in)


def method_uri(route: Route[Any]) -> str:
    return f"{route.method} {route.uri}"


def _versioned_uri(version: int, uri: str) -> str:
    separator = "" if uri.startswith("/") else "/"
    return f"/v{version}{separator}{uri}"


@dataclass(frozen=True, slots=True)
class Versions:
    """The inclusive range of API versions a service exposes."""

    start_version: int
    last_version: int

    @staticmethod
    def from_(start_version: int) -> VersionsFrom:
        return VersionsFrom(start_version)

    def expand(self, versioned_routes: Iterable[VersionedRoute]) -> list[Route[Any]]:
        """Expand every versioned route to one route per version it is valid in.

        Raises ``OverlappingVersionedRoutesError`` naming every
        ``"METHOD uri"`` produced more than once.
        """
        routes = [
            route
            for versioned in versioned_routes
            for route in self._expand_one(versioned)
        ]
        self._sanity_check(routes)
        return routes

    def _expand_one(self, versioned: VersionedRoute) -> list[Route[Any]]:
        lower = max(self.start_version, versioned.valid_from)
        upper_exclusive = (
            versioned.removed_in if versioned.removed_in is not None else self.last_version + 1
        )
        upper_exclusive = min(upper_exclusive, self.last_version + 1)
        route = versioned.route
        return [
            route.copy(route.method, _versioned_uri(version, route.uri), route.handler, route.doc_string)
            for version in range(lower, upper_exclusive)
        ]

    @staticmethod
    def _sanity_check(routes: list[Route[Any]]) -> None:
        counts = Counter(method_uri(route) for route in routes)
        overlaps = tuple(sorted(key for key, count in counts.items() if count > 1))
        if overlaps:
            raise OverlappingVersionedRoutesError(overlaps)


@dataclass(frozen=True, slots=True)
class VersionsFrom:
    """Half-built ``Versions``: ``Versions.from_(0).to(2)``."""

    start_version: int

    def to(self, last_version: int) -> Versions:
        return Versions(self.start_version, last_version)
