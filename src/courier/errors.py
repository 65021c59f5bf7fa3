"""Courier exception hierarchy.

Shared across the router, versions, engine, and dispatch so every module
raises and catches the same types. Everything except the dispatch-time
wrappers is a startup failure: it is raised while routes are being
defined or compiled, never while serving a request.
"""


class CourierError(Exception):
    """Base for all courier-specific errors."""


class ConfigurationError(CourierError):
    """Raised when a route table or routing configuration is invalid.

    Expected to abort service startup.
    """


class InvalidUriError(CourierError):
    """The method/URI pair of a request cannot be routed.

    Distinct from "no match": a malformed path can never match any rule,
    so the caller gets a 400 rather than a 404.
    """


class DuplicateCaptureNameError(ConfigurationError):
    """A path pattern declares the same capture name more than once."""

    def __init__(self, path: str, names: tuple[str, ...]) -> None:
        self.path = path
        self.names = names
        super().__init__(f"duplicate extraction names in {path!r}: {','.join(names)}")


class VersionRangeError(ConfigurationError, ValueError):
    """A versioned route has a negative bound or an empty validity window."""


class OverlappingVersionedRoutesError(ConfigurationError):
    """Version expansion produced the same method and URI more than once.

    ``overlaps`` holds every offending ``"METHOD uri"`` key, sorted.
    """

    def __init__(self, overlaps: tuple[str, ...]) -> None:
        self.overlaps = overlaps
        super().__init__(
            "versioned routes overlap for the following method/uris: " + ", ".join(overlaps)
        )


class EngineAlreadyFinalizedError(CourierError, RuntimeError):
    """A route was registered after the routing table was read."""

    def __init__(self) -> None:
        super().__init__(
            "Routing engine has already been initialized. This is most likely a sign of "
            "routes being registered outside of application initialisation."
        )


class CompletionError(CourierError):
    """Generic wrapper around the real cause of a failed completion.

    The dispatcher unwraps exactly one level of this before reporting.
    """

    def __init__(self, cause: BaseException) -> None:
        super().__init__(str(cause))
        self.__cause__ = cause


class IllegalStateError(CourierError, RuntimeError):
    """An internal invariant was violated at request time."""
