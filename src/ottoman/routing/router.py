"""Compiled router with trie-based path matching.

Routes are registered while the schema is walked and frozen with
``compile()`` before the first request. Paths use ``:name`` segments for
parameters (``/user/:id``).
"""

from ottoman.errors import ConfigurationError
from ottoman.routing.route import PathSegment, Route, RouteMatch


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"        -> [PathSegment("users")]
        "/users/:id"    -> [PathSegment("users"), PathSegment(":id", is_param=True, param_name="id")]
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith(":"):
            segments.append(PathSegment(value=part, is_param=True, param_name=part[1:]))
        else:
            segments.append(PathSegment(value=part))
    return segments


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("children", "param_child", "param_name", "routes_by_method")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Single parameter child (only one param name per level)
        self.param_child: _TrieNode | None = None
        self.param_name: str | None = None
        # Routes at this node, keyed by HTTP method
        self.routes_by_method: dict[str, Route] = {}


class Router:
    """Compiled router with trie-based path matching.

    Usage::

        router = Router()
        router.add(Route("/user/:id", handler, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/user/7")   # RouteMatch or None
    """

    __slots__ = ("_compiled", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route to the router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        node = self._root
        for seg in parse_path(route.path):
            if seg.is_param:
                if node.param_child is None:
                    node.param_child = _TrieNode()
                    node.param_name = seg.param_name
                elif node.param_name != seg.param_name:
                    msg = (
                        f"Conflicting parameter names at {route.path!r}: "
                        f":{node.param_name} vs :{seg.param_name}"
                    )
                    raise RuntimeError(msg)
                node = node.param_child
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        methods = {method.upper() for method in route.methods}
        for method in sorted(methods):
            existing = node.routes_by_method.get(method)
            if existing is not None:
                msg = (
                    f"Route {route.name or route.path!r} collides with "
                    f"{existing.name or existing.path!r} at {method} {route.path}"
                )
                raise ConfigurationError(msg)
        for method in methods:
            node.routes_by_method[method] = route

    @property
    def routes(self) -> list[Route]:
        """Return every unique registered Route, in trie order."""
        seen: set[int] = set()
        result: list[Route] = []
        self._collect_routes(self._root, seen, result)
        return result

    def _collect_routes(self, node: _TrieNode, seen: set[int], result: list[Route]) -> None:
        for route in node.routes_by_method.values():
            if id(route) not in seen:
                seen.add(id(route))
                result.append(route)
        for child in node.children.values():
            self._collect_routes(child, seen, result)
        if node.param_child is not None:
            self._collect_routes(node.param_child, seen, result)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Match a request path and method against the trie.

        Returns ``None`` when no route serves this method and path, so the
        caller can hand the request on instead of answering it.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        return self._match_node(self._root, parts, 0, {}, method.upper())

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
        method: str,
    ) -> RouteMatch | None:
        if index == len(parts):
            route = node.routes_by_method.get(method)
            if route is None:
                return None
            return RouteMatch(route=route, path_params=params)

        part = parts[index]

        # 1. Static child first (exact match)
        child = node.children.get(part)
        if child is not None:
            result = self._match_node(child, parts, index + 1, params, method)
            if result is not None:
                return result

        # 2. Parameter child
        if node.param_child is not None and node.param_name is not None:
            new_params = {**params, node.param_name: part}
            return self._match_node(node.param_child, parts, index + 1, new_params, method)

        return None
