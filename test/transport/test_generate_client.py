"""Tests for the generation client."""

import json

import httpx
import pytest

from conftest import sse_body
from ndraft.exceptions import TransportError
from ndraft.transport import GenerateClient

PROXY_URL = "http://proxy.test/api/generate"


async def collect(client, prompt="hi", session_id="sess_1"):
    return [chunk async for chunk in client.stream(prompt, session_id)]


class TestGenerateClient:
    """Tests for GenerateClient."""

    @pytest.mark.asyncio
    async def test_streams_body_and_sends_payload(self, logger):
        """Test the request payload and the streamed body."""
        seen = {}
        body = sse_body("Hello", " world")

        def handler(request):
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["json"] = json.loads(request.content)
            return httpx.Response(200, content=body, headers={"content-type": "text/event-stream"})

        client = GenerateClient(PROXY_URL, transport=httpx.MockTransport(handler), logger=logger)
        chunks = await collect(client, prompt="Write a haiku")

        assert b"".join(chunks) == body
        assert seen["method"] == "POST"
        assert seen["url"] == PROXY_URL
        assert seen["json"] == {"sessionId": "sess_1", "prompt": "Write a haiku"}

    @pytest.mark.asyncio
    async def test_url_resolved_per_request(self, logger):
        """Test a callable resolver is consulted on every stream."""
        urls = iter(["http://one.test/gen", "http://two.test/gen"])
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, content=sse_body("x"))

        client = GenerateClient(lambda: next(urls), transport=httpx.MockTransport(handler), logger=logger)
        await collect(client)
        await collect(client)

        assert seen == ["http://one.test/gen", "http://two.test/gen"]

    @pytest.mark.asyncio
    async def test_non_success_status(self, logger):
        """Test a non-2xx answer raises TransportError with the status."""
        client = GenerateClient(
            PROXY_URL,
            transport=httpx.MockTransport(lambda request: httpx.Response(503, text="busy")),
            logger=logger,
        )

        with pytest.raises(TransportError) as exc_info:
            await collect(client)

        assert exc_info.value.message == "Proxy Error: 503"
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_network_error(self, logger):
        """Test connection failures surface as TransportError."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = GenerateClient(PROXY_URL, transport=httpx.MockTransport(handler), logger=logger)

        with pytest.raises(TransportError) as exc_info:
            await collect(client)

        assert "connection refused" in exc_info.value.message
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_timeout(self, logger):
        """Test timeouts surface as TransportError."""

        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        client = GenerateClient(
            PROXY_URL,
            timeout_seconds=5,
            transport=httpx.MockTransport(handler),
            logger=logger,
        )

        with pytest.raises(TransportError) as exc_info:
            await collect(client)

        assert "timed out after 5 seconds" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_malformed_url(self, logger):
        """Test an unparseable endpoint surfaces as TransportError."""

        def handler(request):
            return httpx.Response(200, content=sse_body("unreachable"))

        client = GenerateClient("http://[::1", transport=httpx.MockTransport(handler), logger=logger)

        with pytest.raises(TransportError) as exc_info:
            await collect(client)

        assert exc_info.value.message.startswith("Invalid proxy URL 'http://[::1'")
        assert exc_info.value.status_code is None
