"""Application-or-meta router.

Paths under the meta prefix (``/_meta/`` by default) belong to a separate,
operator-facing router; everything else goes to the application router.
"""

from __future__ import annotations

from urllib.parse import urlsplit

from courier.config import META_PREFIX
from courier.http.request import Request
from courier.routing.application_router import ApplicationRouter
from courier.routing.rule import RuleMatch


def is_meta(uri: str, prefix: str = META_PREFIX) -> bool:
    """True if the path of *uri* starts with *prefix*. Never raises."""
    try:
        path = urlsplit(uri).path
    except ValueError:
        return False
    return path.startswith(prefix)


class ApplicationOrMetaRouter[T]:
    """Dispatch to the meta router for meta paths, the application router otherwise.

    ``methods_for_valid_rules`` is the union of both routers, so a 405
    lists methods registered in either. ``rule_targets`` is application
    targets followed by meta targets.
    """

    __slots__ = ("application_router", "meta_router", "prefix")

    def __init__(
        self,
        application_router: ApplicationRouter[T],
        meta_router: ApplicationRouter[T],
        prefix: str = META_PREFIX,
    ) -> None:
        self.application_router = application_router
        self.meta_router = meta_router
        self.prefix = prefix

    def match(self, request: Request) -> RuleMatch[T] | None:
        if is_meta(request.uri, self.prefix):
            return self.meta_router.match(request)
        return self.application_router.match(request)

    def methods_for_valid_rules(self, request: Request) -> frozenset[str]:
        union = set(self.application_router.methods_for_valid_rules(request))
        union.update(self.meta_router.methods_for_valid_rules(request))
        return frozenset(union)

    def rule_targets(self) -> list[T]:
        return [*self.application_router.rule_targets(), *self.meta_router.rule_targets()]
