"""ApplicationRouter protocol and the rule-based implementation.

An ApplicationRouter matches whole requests, not bare paths: it parses
the URI, rejects requests that cannot be routed, and answers the
"which methods would have worked?" question used for 405 and OPTIONS.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol
from urllib.parse import urlsplit

from courier.errors import InvalidUriError
from courier.http.request import Request
from courier.routing.router import Router
from courier.routing.rule import Rule, RuleMatch

logger = logging.getLogger("courier.routing")


class ApplicationRouter[T](Protocol):
    """Polymorphic request matcher."""

    def match(self, request: Request) -> RuleMatch[T] | None:
        """Match *request* to a rule.

        Returns ``None`` if no rule matches. Raises ``InvalidUriError``
        if the method or URI of the request is malformed.
        """
        ...

    def methods_for_valid_rules(self, request: Request) -> frozenset[str]:
        """Methods that some rule accepts for the request's URI (possibly none)."""
        ...

    def rule_targets(self) -> list[T]:
        """Every target this router can route to."""
        ...


def request_path(request: Request) -> str:
    """Return the raw path of *request*, ``"/"`` for an empty path.

    Raises ``InvalidUriError`` if the URI cannot be parsed.
    """
    try:
        path = urlsplit(request.uri).path
    except ValueError as exc:
        logger.warning(
            "Invalid URI sent %s %s by service %s",
            request.method,
            request.uri,
            request.service or "<unknown>",
            exc_info=exc,
        )
        raise InvalidUriError(f"Invalid URI: {request.uri!r}") from exc
    return path or "/"


class RuleRouter[T]:
    """ApplicationRouter backed by a compiled trie ``Router``."""

    __slots__ = ("_router",)

    def __init__(self, router: Router[T]) -> None:
        self._router = router

    @classmethod
    def of(cls, rules: Iterable[Rule[T]], *, optional_trailing_slash: bool = True) -> RuleRouter[T]:
        return cls(Router.compile(rules, optional_trailing_slash=optional_trailing_slash))

    @property
    def router(self) -> Router[T]:
        return self._router

    def match(self, request: Request) -> RuleMatch[T] | None:
        if not request.method:
            logger.warning(
                "Invalid request for %s sent without method by service %s",
                request.uri,
                request.service or "<unknown>",
            )
            raise InvalidUriError(f"Request for {request.uri!r} has no method")

        return self._router.match(request.method, request_path(request))

    def methods_for_valid_rules(self, request: Request) -> frozenset[str]:
        try:
            path = request_path(request)
        except InvalidUriError:
            return frozenset()
        return self._router.allowed_methods(path)

    def rule_targets(self) -> list[T]:
        return self._router.targets()
