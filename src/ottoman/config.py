"""Ottoman configuration.

OttomanConfig is a frozen dataclass — immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from graphql import GraphQLSchema

from ottoman.errors import ConfigurationError
from ottoman.execution import default_execute, default_subscribe
from ottoman.routing.route import METHODS


@dataclass(frozen=True, slots=True)
class OttomanConfig:
    """Everything needed to expose a schema over REST.

    Only ``schema`` is required::

        config = OttomanConfig(
            schema=schema,
            base_path="/api",
            method={"Query.feed": "POST"},
            context=lambda request: {"user": request.header("x-user")},
        )
    """

    schema: GraphQLSchema

    # Routing
    base_path: str = ""
    method: Mapping[str, str] = field(default_factory=dict)  # "Type.field" -> HTTP method

    # Per-request context: a constant, or a (sync or async) callable taking the Request
    context: Any = None

    # Execution
    execute: Callable[..., Any] = default_execute
    subscribe: Callable[..., Any] = default_subscribe
    error_handler: Callable[..., Any] | None = None  # errors -> RouteError

    # Called once per compiled operation route with its RouteInfo
    on_route: Callable[..., Any] | None = None

    # Selection building
    models: tuple[str, ...] = ()  # types reduced to ``id`` when nested
    ignore: tuple[str, ...] = ()  # "Type.field" entries left out of selections
    depth_limit: int = 1  # extra repetitions allowed for a circular type

    # Webhooks
    webhook_timeout: float = 10.0

    # Standalone server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    def __post_init__(self) -> None:
        if self.base_path and (not self.base_path.startswith("/") or self.base_path.endswith("/")):
            msg = f"base_path must start with '/' and not end with '/', got {self.base_path!r}"
            raise ConfigurationError(msg)

        normalized: dict[str, str] = {}
        for key, value in self.method.items():
            method = str(value).upper()
            if method not in METHODS:
                allowed = ", ".join(sorted(METHODS))
                msg = f"Unsupported method {value!r} for {key!r}; expected one of {allowed}"
                raise ConfigurationError(msg)
            normalized[key] = method
        object.__setattr__(self, "method", normalized)

        if self.depth_limit < 0:
            msg = "depth_limit must be >= 0"
            raise ConfigurationError(msg)
