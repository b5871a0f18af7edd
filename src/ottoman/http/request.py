"""Immutable HTTP request.

Frozen metadata with async body access. Path parameters are attached by
the dispatcher after routing via ``with_path_params``.
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field, replace
from typing import Any

from ottoman._internal.asgi import Receive, Scope
from ottoman.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Body bytes are read from ASGI ``receive`` once and cached, so the
    request can be handed down a middleware chain and still be parsed by
    whoever needs the body.
    """

    method: str
    path: str
    query: QueryParams
    headers: tuple[tuple[bytes, bytes], ...]
    path_params: dict[str, str]
    client: tuple[str, int] | None

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Private: mutable cache shared by copies made with ``replace``
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first value of header *name* (case-insensitive)."""
        key = name.lower().encode("latin-1")
        for raw_name, value in self.headers:
            if raw_name.lower() == key:
                return value.decode("latin-1")
        return default

    @property
    def content_type(self) -> str | None:
        return self.header("content-type")

    @property
    def url(self) -> str:
        """Path plus query string, as received."""
        qs = self.query.raw
        if qs:
            return f"{self.path}?{qs.decode('latin-1')}"
        return self.path

    def with_path_params(self, params: dict[str, str]) -> Request:
        """Return a copy carrying the matched route parameters."""
        return replace(self, path_params=params)

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body (cached after the first call)."""
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON. An empty body parses as ``None``.

        Raises ``ValueError`` on malformed JSON.
        """
        if "_json" in self._cache:
            return self._cache["_json"]
        raw = await self.body()
        result = json.loads(raw) if raw.strip() else None
        self._cache["_json"] = result
        return result

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            query=QueryParams(scope.get("query_string", b"")),
            headers=tuple(tuple(pair) for pair in scope.get("headers", ())),
            path_params={},
            client=tuple(client) if client else None,
            _receive=receive,
        )
