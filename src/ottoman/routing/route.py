"""Route, RouteMatch, and RouteInfo frozen dataclasses."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

from graphql import DocumentNode

Method: TypeAlias = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]

METHODS: frozenset[str] = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH"})


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static: ``/users``  (is_param=False)
    Param:  ``/:id``    (is_param=True, param_name="id")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None


@dataclass(frozen=True, slots=True)
class Route:
    """A route registered in the router.

    ``handler`` receives a ``RouteRequest`` and returns a ``RouteResponse``.
    """

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    name: str | None = None


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]


@dataclass(frozen=True, slots=True)
class RouteInfo:
    """A compiled operation route, as reported to ``on_route`` observers."""

    document: DocumentNode
    path: str
    method: Method
