"""Ottoman — serve a GraphQL schema as a REST API.

Every Query and Mutation field becomes a route, and Subscription fields
are exposed through webhook endpoints.

Basic usage::

    from ottoman import App, Ottoman

    ottoman = Ottoman(schema=schema, base_path="/api")
    app = App(ottoman)
    app.run()

``GET /api/user/7`` then runs ``query user_query($id: ID!) { user(id: $id) {...} }``
and answers with the ``user`` field as JSON.
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "ConfigurationError",
    "HTTPError",
    "Middleware",
    "Next",
    "Ottoman",
    "OttomanConfig",
    "OttomanError",
    "Request",
    "Response",
    "RouteError",
    "RouteInfo",
    "RouteResult",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import ottoman`` from loading graphql-core and httpx until
    they are needed.
    """
    if name == "App":
        from ottoman.app import App

        return App

    if name == "Ottoman":
        from ottoman.dispatch import Ottoman

        return Ottoman

    if name in ("RouteError", "RouteResult"):
        from ottoman import dispatch

        return getattr(dispatch, name)

    if name == "OttomanConfig":
        from ottoman.config import OttomanConfig

        return OttomanConfig

    if name == "RouteInfo":
        from ottoman.routing.route import RouteInfo

        return RouteInfo

    if name == "Request":
        from ottoman.http.request import Request

        return Request

    if name == "Response":
        from ottoman.http.response import Response

        return Response

    if name in ("Middleware", "Next"):
        from ottoman.middleware import protocol

        return getattr(protocol, name)

    if name in ("OttomanError", "ConfigurationError", "HTTPError"):
        from ottoman import errors

        return getattr(errors, name)

    msg = f"module 'ottoman' has no attribute {name!r}"
    raise AttributeError(msg)
