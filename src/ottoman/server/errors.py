"""Host error channel.

Exceptions that escape the middleware chain end up here. ``HTTPError``
keeps its status; anything else is logged with its traceback and becomes
a 500.
"""

import logging

from ottoman.errors import HTTPError
from ottoman.http.request import Request
from ottoman.http.response import Response, json_response

logger = logging.getLogger("ottoman.server")


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
    return json_response(exc.payload, exc.status)


def handle_internal_error(exc: Exception, request: Request, *, debug: bool = False) -> Response:
    """Log an unexpected failure and answer with a JSON 500."""
    logger.exception("500 %s %s", request.method, request.path)
    message = f"{type(exc).__name__}: {exc}" if debug else "Internal Server Error"
    return json_response({"message": message}, 500)
