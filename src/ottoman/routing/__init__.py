"""Route table: compiled trie router plus method/path derivation."""

from ottoman.routing.naming import convert_name, get_path, is_single_with_id, produce_method
from ottoman.routing.route import Route, RouteInfo, RouteMatch
from ottoman.routing.router import Router

__all__ = [
    "Route",
    "RouteInfo",
    "RouteMatch",
    "Router",
    "convert_name",
    "get_path",
    "is_single_with_id",
    "produce_method",
]
