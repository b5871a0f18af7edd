"""Outbound webhook delivery for subscription events.

Each event is POSTed as JSON to the subscriber's callback URL. A failed
delivery is logged and reported back as a value; it never raises, so one
unreachable callback cannot end the subscription that produced it.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from ottoman.http.response import dumps

logger = logging.getLogger("ottoman.webhooks")


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    """Outcome of one webhook POST."""

    success: bool
    status_code: int | None
    response_time_ms: int
    error_message: str | None = None


class WebhookClient:
    """Posts subscription events to callback URLs.

    Owns an ``httpx.AsyncClient`` unless one is passed in (tests pass one
    built on ``httpx.MockTransport``).
    """

    __slots__ = ("_client", "_owns_client")

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def deliver(self, url: str, payload: Any, *, subscription_id: str) -> DeliveryResult:
        """POST *payload* to *url*. Returns the outcome instead of raising."""
        start = time.monotonic()
        try:
            response = await self._client.post(
                url,
                content=dumps(payload).encode("utf-8"),
                headers={
                    "Content-Type": "application/json",
                    "X-Subscription-Id": subscription_id,
                },
            )
        except httpx.HTTPError as exc:
            elapsed = int((time.monotonic() - start) * 1000)
            logger.warning("Webhook delivery to %s failed (%s): %s", url, subscription_id, exc)
            return DeliveryResult(False, None, elapsed, str(exc))

        elapsed = int((time.monotonic() - start) * 1000)
        if response.is_success:
            logger.debug("Delivered event for %s to %s in %dms", subscription_id, url, elapsed)
            return DeliveryResult(True, response.status_code, elapsed)

        logger.warning(
            "Webhook %s rejected event for %s with status %d",
            url,
            subscription_id,
            response.status_code,
        )
        return DeliveryResult(
            False,
            response.status_code,
            elapsed,
            f"HTTP {response.status_code}",
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
