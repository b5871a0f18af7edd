"""Route compilation and request dispatch.

``Ottoman`` walks the schema once, compiles one route per Query and
Mutation field plus the webhook endpoints, and then acts as middleware:
requests it has a route for are answered with JSON, everything else is
handed to ``next`` untouched.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

from graphql import DocumentNode, print_ast

from ottoman._internal.invoke import invoke
from ottoman.config import OttomanConfig
from ottoman.errors import ConfigurationError, HTTPError, SubscriptionError
from ottoman.execution import format_error, normalize_result
from ottoman.http.request import Request
from ottoman.http.response import Response, json_response
from ottoman.middleware.protocol import Next
from ottoman.operation.builder import build_document, build_operation_node_for_field
from ottoman.operation.info import OperationInfo, get_operation_info
from ottoman.params import read_body, resolve_variables
from ottoman.routing.naming import get_path, is_single_with_id, produce_method
from ottoman.routing.route import Method, Route, RouteInfo
from ottoman.routing.router import Router
from ottoman.subscriptions import (
    StartSubscriptionEvent,
    SubscriptionManager,
    UpdateSubscriptionEvent,
)
from ottoman.webhooks import WebhookClient

logger = logging.getLogger("ottoman.router")


@dataclass(frozen=True, slots=True)
class RouteRequest:
    request: Request
    params: Mapping[str, str]
    context_value: Any


@dataclass(frozen=True, slots=True)
class RouteResult:
    status: int
    body: Any
    status_message: str | None = None


@dataclass(frozen=True, slots=True)
class RouteError:
    status: int
    error: Any
    status_message: str | None = None


RouteResponse: TypeAlias = RouteResult | RouteError
RouteHandler: TypeAlias = Callable[[RouteRequest], Awaitable[RouteResponse]]
ErrorHandler: TypeAlias = Callable[[Sequence[Any]], RouteError | Awaitable[RouteError]]


def default_error_handler(errors: Sequence[Any]) -> RouteError:
    """Report the first execution error as a 500."""
    return RouteError(status=500, error=errors[0])


def use_handler(
    config: OttomanConfig,
    *,
    info: OperationInfo,
    document: DocumentNode,
    field_name: str,
) -> RouteHandler:
    """Build the request handler for one compiled operation."""
    source = print_ast(document)
    error_handler = config.error_handler or default_error_handler

    async def handler(route_request: RouteRequest) -> RouteResponse:
        variables = await resolve_variables(
            route_request.request,
            route_request.params,
            info,
            config.schema,
        )
        result = await invoke(
            config.execute,
            schema=config.schema,
            source=source,
            context_value=route_request.context_value,
            variable_values=variables,
            operation_name=info.operation_name,
        )
        outcome = normalize_result(result)
        if outcome.errors:
            return await invoke(error_handler, outcome.errors)
        data = outcome.data
        body = data.get(field_name) if isinstance(data, Mapping) else None
        return RouteResult(status=200, body=body)

    return handler


def create_operation_route(
    config: OttomanConfig,
    router: Router,
    *,
    kind: Literal["query", "mutation"],
    field_name: str,
) -> RouteInfo:
    """Compile, register, and describe the route for one root field."""
    logger.debug("Creating %s %s", field_name, kind)

    schema = config.schema
    root = schema.query_type if kind == "query" else schema.mutation_type
    if root is None:
        msg = f"Schema has no {kind} type"
        raise ConfigurationError(msg)

    operation = build_operation_node_for_field(
        kind=kind,
        schema=schema,
        field=field_name,
        models=config.models,
        ignore=config.ignore,
        circular_reference_depth=config.depth_limit,
    )
    document = build_document(operation)
    info = get_operation_info(document)
    if info is None:
        msg = f"Could not compile {kind} {field_name!r}"
        raise ConfigurationError(msg)

    if kind == "query":
        path = get_path(field_name, is_single_with_id(root.fields[field_name]))
        default: Method = "GET"
    else:
        path = get_path(field_name)
        default = "POST"
    method = produce_method(root.name, field_name, config.method, default)

    router.add(
        Route(
            path=path,
            handler=use_handler(config, info=info, document=document, field_name=field_name),
            methods=frozenset({method}),
            name=f"{root.name}.{field_name}",
        )
    )
    logger.debug("%s %s available at %s %s", field_name, kind, method, path)

    return RouteInfo(document=document, path=path, method=method)


def build_routes(config: OttomanConfig, router: Router) -> tuple[RouteInfo, ...]:
    """Register a route for every Query field, then every Mutation field.

    ``config.on_route`` sees each route after it has been registered.
    """
    routes: list[RouteInfo] = []
    for kind, root in (("query", config.schema.query_type), ("mutation", config.schema.mutation_type)):
        if root is None:
            continue
        for field_name in root.fields:
            info = create_operation_route(config, router, kind=kind, field_name=field_name)
            routes.append(info)
            if config.on_route is not None:
                config.on_route(info)
    return tuple(routes)


def _subscription_failure(message: str) -> Callable[[HTTPError], RouteError]:
    def fail(exc: HTTPError) -> RouteError:
        return RouteError(status=exc.status, status_message=message, error=exc.payload)

    return fail


def webhook_routes(manager: SubscriptionManager) -> list[Route]:
    """The fixed start/update/stop endpoints for webhook subscriptions."""
    start_failed = _subscription_failure("Subscription failed")
    update_failed = _subscription_failure("Subscription failed to update")
    stop_failed = _subscription_failure("Subscription failed to stop")

    async def start(route_request: RouteRequest) -> RouteResponse:
        try:
            body = await read_body(route_request.request)
            event = StartSubscriptionEvent(
                subscription=body.get("subscription"),
                variables=body.get("variables"),
                url=body.get("url"),
            )
            if not isinstance(event.subscription, str):
                msg = "A 'subscription' field name is required"
                raise SubscriptionError(msg)
            result = await manager.start(event, route_request.context_value)
        except HTTPError as exc:
            return start_failed(exc)
        return RouteResult(status=200, status_message="OK", body=result)

    async def update(route_request: RouteRequest) -> RouteResponse:
        try:
            body = await read_body(route_request.request)
            event = UpdateSubscriptionEvent(
                id=route_request.params["id"],
                variables=body.get("variables"),
            )
            result = await manager.update(event, route_request.context_value)
        except HTTPError as exc:
            return update_failed(exc)
        return RouteResult(status=200, status_message="OK", body=result)

    async def stop(route_request: RouteRequest) -> RouteResponse:
        try:
            result = await manager.stop(route_request.params["id"])
        except HTTPError as exc:
            return stop_failed(exc)
        return RouteResult(status=200, status_message="OK", body=result)

    return [
        Route("/webhook", start, frozenset({"POST"}), name="webhook.start"),
        Route("/webhook/:id", update, frozenset({"POST"}), name="webhook.update"),
        Route("/webhook/:id", stop, frozenset({"DELETE"}), name="webhook.stop"),
    ]


def to_response(route_response: RouteResponse) -> Response:
    """Serialize a route outcome: one status line, one JSON body."""
    if isinstance(route_response, RouteResult):
        return json_response(route_response.body, route_response.status, route_response.status_message)
    return json_response(
        format_error(route_response.error),
        route_response.status,
        route_response.status_message,
    )


class Ottoman:
    """A schema exposed as REST routes, usable as middleware.

    Usage::

        ottoman = Ottoman(OttomanConfig(schema=schema, base_path="/api"))

        # as middleware of the bundled ASGI app
        app = App(ottoman)

        # or called directly from another middleware chain
        response = await ottoman(request, next)

    All routes are compiled in the constructor; a bad schema reference
    raises ``ConfigurationError`` here rather than on the first request.
    """

    __slots__ = ("_router", "config", "routes", "subscriptions")

    def __init__(
        self,
        config: OttomanConfig | None = None,
        *,
        webhooks: WebhookClient | None = None,
        **options: Any,
    ) -> None:
        if config is None:
            config = OttomanConfig(**options)
        elif options:
            msg = "Pass either an OttomanConfig or keyword options, not both"
            raise TypeError(msg)
        self.config: OttomanConfig = config

        logger.debug("Creating router")
        router = Router()
        self.routes: tuple[RouteInfo, ...] = build_routes(config, router)

        self.subscriptions = SubscriptionManager(
            config.schema,
            subscribe=config.subscribe,
            webhooks=webhooks or WebhookClient(timeout=config.webhook_timeout),
            models=config.models,
            ignore=config.ignore,
            depth_limit=config.depth_limit,
        )
        for route in webhook_routes(self.subscriptions):
            router.add(route)
        router.compile()
        self._router = router

    @property
    def router(self) -> Router:
        return self._router

    async def __call__(self, request: Request, next: Next) -> Response:
        response = await self.dispatch(request)
        if response is None:
            return await next(request)
        return response

    async def dispatch(self, request: Request) -> Response | None:
        """Answer *request* if a route matches, else return ``None``.

        ``HTTPError`` raised while building the context or running the
        route becomes an error response; any other exception propagates
        to the host.
        """
        relative = self._strip_base_path(request.path)
        if relative is None:
            return None
        match = self._router.match(request.method, relative)
        if match is None:
            return None

        request = request.with_path_params(match.path_params)
        try:
            context_value = await self._build_context(request)
            route_response = await match.route.handler(
                RouteRequest(request=request, params=match.path_params, context_value=context_value)
            )
        except HTTPError as exc:
            logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
            route_response = RouteError(status=exc.status, error=exc.payload)
        return to_response(route_response)

    async def aclose(self) -> None:
        """Stop all webhook subscriptions and release the HTTP client."""
        await self.subscriptions.aclose()

    def _strip_base_path(self, path: str) -> str | None:
        base = self.config.base_path
        if not base:
            return path
        if path == base:
            return "/"
        if path.startswith(base + "/"):
            return path[len(base) :]
        return None

    async def _build_context(self, request: Request) -> Any:
        context = self.config.context
        if callable(context):
            return await invoke(context, request)
        return context
