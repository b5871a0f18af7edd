"""JSON HTTP response.

Every response ottoman produces carries a JSON body. ``reason`` holds the
optional status message; ASGI has no field for a custom reason phrase, so
it is exposed to in-process consumers (middleware, tests) only.
"""

import json
from dataclasses import dataclass, replace
from typing import Any

JSON_CONTENT_TYPE = "application/json"


def dumps(data: Any) -> str:
    """Serialize *data* compactly; the wire format for all bodies."""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = JSON_CONTENT_TYPE
    headers: tuple[tuple[str, str], ...] = ()
    reason: str | None = None

    def with_status(self, status: int, reason: str | None = None) -> "Response":
        """Return a new Response with a different status (and reason)."""
        return replace(self, status=status, reason=reason)

    def with_header(self, name: str, value: str) -> "Response":
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json.loads(self.body_bytes)


def json_response(data: Any, status: int = 200, reason: str | None = None) -> Response:
    """Build a ``Response`` whose body is *data* serialized as JSON."""
    return Response(body=dumps(data), status=status, reason=reason)
