"""Courier: request routing and dispatch core for HTTP services.

Match a method and URI to a route, extract path parameters, run the
route's composed middleware asynchronously, and turn the result (or the
failure) into a reply.

Basic usage::

    from courier import Route, RoutingEngine

    engine = RoutingEngine()
    engine.register_route(Route.sync("GET", "/users/<id>", lambda ctx: ctx.path_args["id"]))
    router = engine.build_router()

Built for Python 3.12+.
"""

__version__ = "0.1.0.dev0"
__all__ = [
    "ApplicationOrMetaRouter",
    "ApplicationRouter",
    "CallerTrust",
    "ConfigurationError",
    "CourierError",
    "DocString",
    "DuplicateCaptureNameError",
    "Endpoint",
    "EndpointInfo",
    "EndpointInvocationHandler",
    "EngineAlreadyFinalizedError",
    "InvalidUriError",
    "Middleware",
    "OverlappingVersionedRoutesError",
    "Request",
    "RequestContext",
    "RequestHandler",
    "Response",
    "Route",
    "RouteProvider",
    "Router",
    "RoutingConfig",
    "RoutingEngine",
    "Rule",
    "RuleMatch",
    "RuleRouter",
    "Status",
    "VersionRangeError",
    "VersionedRoute",
    "Versions",
]

_LAZY_IMPORTS: dict[str, str] = {
    "ApplicationOrMetaRouter": "courier.routing.composite",
    "ApplicationRouter": "courier.routing.application_router",
    "RuleRouter": "courier.routing.application_router",
    "CallerTrust": "courier.dispatch.invocation",
    "EndpointInvocationHandler": "courier.dispatch.invocation",
    "Endpoint": "courier.dispatch.endpoint",
    "EndpointInfo": "courier.dispatch.endpoint",
    "ConfigurationError": "courier.errors",
    "CourierError": "courier.errors",
    "DuplicateCaptureNameError": "courier.errors",
    "EngineAlreadyFinalizedError": "courier.errors",
    "InvalidUriError": "courier.errors",
    "OverlappingVersionedRoutesError": "courier.errors",
    "VersionRangeError": "courier.errors",
    "DocString": "courier.routing.route",
    "Route": "courier.routing.route",
    "RouteProvider": "courier.routing.route",
    "Middleware": "courier.routing.middleware",
    "Request": "courier.http.request",
    "Response": "courier.http.response",
    "Status": "courier.http.status",
    "RequestContext": "courier.context",
    "RequestHandler": "courier.request.handler",
    "Router": "courier.routing.router",
    "Rule": "courier.routing.rule",
    "RuleMatch": "courier.routing.rule",
    "RoutingConfig": "courier.config",
    "RoutingEngine": "courier.engine",
    "VersionedRoute": "courier.routing.versions",
    "Versions": "courier.routing.versions",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import courier`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
