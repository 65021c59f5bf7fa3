"""Routing configuration.

One frozen ``RoutingConfig`` is shared by the router builder and the
invocation handler.
"""

from dataclasses import dataclass

META_PREFIX = "/_meta/"


@dataclass(frozen=True, slots=True)
class RoutingConfig:
    """Routing and dispatch configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RoutingConfig(trusted_services=("edge-gateway",))
    """

    # Paths under this prefix go to the meta (operator) router
    meta_prefix: str = META_PREFIX

    # Origin services whose callers see exception messages in 500 replies
    trusted_services: tuple[str, ...] = ("gateway", "internal-gateway")

    # "/users/" and "/users" match the same rule
    optional_trailing_slash: bool = True
