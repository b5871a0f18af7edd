"""ASGI handler — translates ASGI scope/messages to ottoman types.

The only component that touches raw HTTP ASGI messages. Builds a Request,
runs it through the middleware chain, maps escaped exceptions through the
host error channel, and sends the Response back through ASGI ``send``.
"""

from collections.abc import Callable
from typing import Any

from ottoman._internal.asgi import Receive, Scope, Send
from ottoman.errors import HTTPError
from ottoman.http.request import Request
from ottoman.http.response import Response, json_response
from ottoman.middleware.protocol import Next
from ottoman.server.errors import handle_http_error, handle_internal_error
from ottoman.server.sender import send_response


async def not_found(request: Request) -> Response:
    """Innermost handler: nothing in the chain claimed the request."""
    return json_response({"message": f"No route matches {request.method} {request.path}"}, 404)


def build_chain(middleware: tuple[Callable[..., Any], ...], innermost: Next = not_found) -> Next:
    """Wrap *innermost* in *middleware*, first entry outermost."""
    handler = innermost
    for mw in reversed(middleware):

        async def make_next(req: Request, _mw: Any = mw, _next: Next = handler) -> Response:
            return await _mw(req, _next)

        handler = make_next
    return handler


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    chain: Next,
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    try:
        response = await chain(request)
    except HTTPError as exc:
        response = handle_http_error(exc, request)
    except Exception as exc:
        response = handle_internal_error(exc, request, debug=debug)

    await send_response(response, send)
