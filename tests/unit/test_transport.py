"""Unit tests for the httpx byte transport."""

import json

import httpx
import pytest

from inkstream.providers.base import RequestSpec
from inkstream.providers.errors import TransportError
from inkstream.transport.httpx_transport import HttpxTransport


def make_transport(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxTransport(client=client), client


def spec(**kwargs):
    values = dict(
        url="https://api.example.com/v1/chat/completions",
        provider="openai",
        json_body={"model": "m", "stream": True},
        headers={"Authorization": "Bearer sk-test"},
    )
    values.update(kwargs)
    return RequestSpec(**values)


class TestHttpxTransport:
    """Test HttpxTransport against an in-process mock server."""

    @pytest.mark.asyncio
    async def test_streams_body(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, content=b"data: one\n\ndata: two\n\n")

        transport, client = make_transport(handler)
        stream = await transport.open(spec())
        chunks = [chunk async for chunk in stream]
        await stream.aclose()
        await stream.aclose()
        await client.aclose()

        assert b"".join(chunks) == b"data: one\n\ndata: two\n\n"
        assert seen == {"method": "POST", "auth": "Bearer sk-test", "body": {"model": "m", "stream": True}}

    @pytest.mark.asyncio
    async def test_error_status(self):
        def handler(request):
            return httpx.Response(503, headers={"Retry-After": "2"}, text="service unavailable")

        transport, client = make_transport(handler)
        with pytest.raises(TransportError) as exc_info:
            await transport.open(spec())
        await client.aclose()

        error = exc_info.value
        assert error.status_code == 503
        assert error.retry_after == 2.0
        assert error.is_retryable
        assert "service unavailable" in error.message

    @pytest.mark.asyncio
    async def test_client_error_status_not_retryable(self):
        def handler(request):
            return httpx.Response(401, json={"error": {"message": "invalid api key"}})

        transport, client = make_transport(handler)
        with pytest.raises(TransportError) as exc_info:
            await transport.open(spec())
        await client.aclose()

        assert exc_info.value.status_code == 401
        assert not exc_info.value.is_retryable

    @pytest.mark.asyncio
    async def test_connection_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        transport, client = make_transport(handler)
        with pytest.raises(TransportError) as exc_info:
            await transport.open(spec())
        await client.aclose()

        assert exc_info.value.is_retryable
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_borrowed_client_is_not_closed(self):
        transport, client = make_transport(lambda request: httpx.Response(200, content=b""))
        await transport.aclose()
        assert not client.is_closed
        await client.aclose()
