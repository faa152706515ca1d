"""
Unit tests for the retry helper.
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from push_to_notion.connectors.http import request_with_retry

pytestmark = pytest.mark.unit


def _counting_transport(statuses: list[int]):
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        status = statuses[min(calls["count"], len(statuses) - 1)]
        calls["count"] += 1
        return httpx.Response(status, json={"ok": status < 400})

    return httpx.MockTransport(handler), calls


class TestRequestWithRetry:
    """Tests for request_with_retry."""

    @pytest.mark.asyncio
    async def test_retries_transient_status_then_succeeds(self):
        transport, calls = _counting_transport([503, 200])

        with patch("push_to_notion.connectors.http.asyncio.sleep", new_callable=AsyncMock) as sleep:
            async with httpx.AsyncClient(transport=transport) as client:
                response = await request_with_retry(client, "GET", "https://api.test/x", max_attempts=3)

        assert response.status_code == 200
        assert calls["count"] == 2
        sleep.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_single_attempt_returns_transient_status(self):
        transport, calls = _counting_transport([503, 200])

        async with httpx.AsyncClient(transport=transport) as client:
            response = await request_with_retry(client, "POST", "https://api.test/x", max_attempts=1)

        assert response.status_code == 503
        assert calls["count"] == 1

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self):
        transport, calls = _counting_transport([400, 200])

        async with httpx.AsyncClient(transport=transport) as client:
            response = await request_with_retry(client, "GET", "https://api.test/x", max_attempts=3)

        assert response.status_code == 400
        assert calls["count"] == 1

    @pytest.mark.asyncio
    async def test_network_error_raises_after_last_attempt(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        with patch("push_to_notion.connectors.http.asyncio.sleep", new_callable=AsyncMock) as sleep:
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                with pytest.raises(httpx.ConnectError):
                    await request_with_retry(client, "GET", "https://api.test/x", max_attempts=2)

        assert sleep.await_count == 1
