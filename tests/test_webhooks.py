"""Tests for ottoman.webhooks — outbound event delivery."""

import json

import httpx
import pytest

from ottoman.webhooks import WebhookClient


def _client(handler) -> WebhookClient:
    return WebhookClient(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestDeliver:
    @pytest.mark.asyncio
    async def test_success(self) -> None:
        received: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            received.append(request)
            return httpx.Response(204)

        result = await _client(handler).deliver("http://hooks.test/a", {"data": {"x": "ü"}}, subscription_id="abc")

        assert result.success is True
        assert result.status_code == 204
        assert result.error_message is None
        assert json.loads(received[0].content) == {"data": {"x": "ü"}}
        assert received[0].headers["x-subscription-id"] == "abc"

    @pytest.mark.asyncio
    async def test_rejected(self) -> None:
        result = await _client(lambda request: httpx.Response(410)).deliver(
            "http://hooks.test/a", {}, subscription_id="abc"
        )
        assert result.success is False
        assert result.status_code == 410
        assert result.error_message == "HTTP 410"

    @pytest.mark.asyncio
    async def test_transport_error_does_not_raise(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = await _client(handler).deliver("http://hooks.test/a", {}, subscription_id="abc")

        assert result.success is False
        assert result.status_code is None
        assert "connection refused" in (result.error_message or "")


class TestClose:
    @pytest.mark.asyncio
    async def test_borrowed_client_left_open(self) -> None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        await WebhookClient(client=client).aclose()
        assert client.is_closed is False
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self) -> None:
        webhooks = WebhookClient(timeout=1.0)
        await webhooks.aclose()
        assert webhooks._client.is_closed is True
