"""Ottoman exception hierarchy.

Shared across the router, dispatcher, parameter resolver, and subscription
manager so every module raises and catches the same types.
"""

from dataclasses import dataclass


class OttomanError(Exception):
    """Base for all ottoman-specific errors."""


class ConfigurationError(OttomanError):
    """Raised when configuration or the schema is unusable.

    Surfaces while routes are compiled, before the first request.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(OttomanError):
    """An error that maps directly to an HTTP status code.

    The dispatcher converts these into a ``RouteError`` instead of letting
    them reach the host's error channel.
    """

    status: int
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)

    @property
    def payload(self) -> dict[str, str]:
        """JSON body describing the error."""
        return {"message": self.detail or f"Error {self.status}"}


class ParameterError(HTTPError):
    """400 — a request parameter could not be coerced to its variable type."""

    def __init__(self, detail: str) -> None:
        super().__init__(status=400, detail=detail)


class SubscriptionError(HTTPError):
    """400 — a webhook subscription could not be started."""

    def __init__(self, detail: str) -> None:
        super().__init__(status=400, detail=detail)


class SubscriptionNotFound(HTTPError):  # noqa: N818 — mirrors NotFound naming
    """404 — no live subscription has the requested id."""

    def __init__(self, subscription_id: str) -> None:
        super().__init__(status=404, detail=f"Subscription {subscription_id!r} not found")
