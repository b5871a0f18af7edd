"""Tests for ottoman.routing.router — compiled trie-based router."""

import pytest

from ottoman.errors import ConfigurationError
from ottoman.routing.route import Route
from ottoman.routing.router import Router, parse_path


def _handler() -> str:
    return "ok"


def _route(path: str, methods: frozenset[str] | None = None) -> Route:
    return Route(path=path, handler=_handler, methods=methods or frozenset({"GET"}))


class TestParsePath:
    def test_static(self) -> None:
        segments = parse_path("/users")
        assert len(segments) == 1
        assert segments[0].value == "users"
        assert segments[0].is_param is False

    def test_param(self) -> None:
        segments = parse_path("/user/:id")
        assert len(segments) == 2
        assert segments[1].is_param is True
        assert segments[1].param_name == "id"

    def test_root(self) -> None:
        assert parse_path("/") == []


class TestRouterMatch:
    def test_static_route(self) -> None:
        router = Router()
        router.add(_route("/feed"))
        router.compile()
        match = router.match("GET", "/feed")
        assert match is not None
        assert match.path_params == {}

    def test_param_route(self) -> None:
        router = Router()
        router.add(_route("/user/:id"))
        router.compile()
        match = router.match("GET", "/user/7")
        assert match is not None
        assert match.path_params == {"id": "7"}

    def test_trailing_slash_ignored(self) -> None:
        router = Router()
        router.add(_route("/feed"))
        router.compile()
        assert router.match("GET", "/feed/") is not None

    def test_method_case_insensitive(self) -> None:
        router = Router()
        router.add(_route("/feed", frozenset({"post"})))
        router.compile()
        assert router.match("post", "/feed") is not None
        assert router.match("GET", "/feed") is None

    def test_unknown_path_is_none(self) -> None:
        router = Router()
        router.add(_route("/feed"))
        router.compile()
        assert router.match("GET", "/nope") is None
        assert router.match("GET", "/feed/extra") is None

    def test_static_beats_param(self) -> None:
        static = _route("/webhook/all")
        param = _route("/webhook/:id")
        router = Router()
        router.add(param)
        router.add(static)
        router.compile()
        assert router.match("GET", "/webhook/all").route is static
        assert router.match("GET", "/webhook/abc").route is param

    def test_same_path_different_methods(self) -> None:
        update = _route("/webhook/:id", frozenset({"POST"}))
        stop = _route("/webhook/:id", frozenset({"DELETE"}))
        router = Router()
        router.add(update)
        router.add(stop)
        router.compile()
        assert router.match("POST", "/webhook/1").route is update
        assert router.match("DELETE", "/webhook/1").route is stop


class TestRouterRegistration:
    def test_add_after_compile_raises(self) -> None:
        router = Router()
        router.compile()
        with pytest.raises(RuntimeError, match="after compilation"):
            router.add(_route("/feed"))

    def test_conflicting_param_names_raise(self) -> None:
        router = Router()
        router.add(_route("/user/:id"))
        with pytest.raises(RuntimeError, match="Conflicting"):
            router.add(_route("/user/:name/posts"))

    def test_routes_lists_each_route_once(self) -> None:
        router = Router()
        both = _route("/feed", frozenset({"GET", "POST"}))
        router.add(both)
        router.add(_route("/user/:id"))
        router.compile()
        assert len(router.routes) == 2

    def test_same_method_and_path_collide(self) -> None:
        router = Router()
        router.add(Route("/user-name", _handler, frozenset({"GET"}), name="Query.userName"))
        with pytest.raises(ConfigurationError, match="'Query.user_name' collides with 'Query.userName'"):
            router.add(Route("/user-name", _handler, frozenset({"get"}), name="Query.user_name"))

    def test_collision_keeps_first_route(self) -> None:
        first = _route("/feed")
        router = Router()
        router.add(first)
        with pytest.raises(ConfigurationError):
            router.add(_route("/feed/", frozenset({"GET", "POST"})))
        router.compile()
        assert router.match("GET", "/feed").route is first
        assert router.match("POST", "/feed") is None
