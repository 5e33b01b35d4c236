import logging
from typing import AsyncIterator, Optional

import httpx

from ..config.settings import StreamSettings
from ..providers.base import RequestSpec
from ..providers.errors import ErrorMapper
from .base import ByteStream, ByteTransport

logger = logging.getLogger(__name__)

ERROR_BODY_LIMIT = 2048


class HttpxByteStream(ByteStream):
    """Response body of a streamed ``httpx`` request."""

    def __init__(self, response: httpx.Response, provider: str):
        self._response = response
        self._provider = provider
        self._closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes():
                if chunk:
                    yield chunk
        except httpx.HTTPError as e:
            raise ErrorMapper.map_transport_error(e, self._provider) from e

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._response.aclose()


class HttpxTransport(ByteTransport):
    """``ByteTransport`` backed by a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        settings: Optional[StreamSettings] = None,
    ):
        settings = settings or StreamSettings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.read_timeout, connect=settings.connect_timeout),
        )

    async def open(self, request: RequestSpec) -> ByteStream:
        http_request = self._client.build_request(
            request.method,
            request.url,
            json=request.json_body,
            headers=request.headers,
        )
        try:
            response = await self._client.send(http_request, stream=True)
        except httpx.HTTPError as e:
            raise ErrorMapper.map_transport_error(e, request.provider) from e

        if response.status_code >= 400:
            body = await self._read_error_body(response)
            await response.aclose()
            retry_after = ErrorMapper.get_retry_after(httpx.HTTPStatusError(
                "error status", request=http_request, response=response,
            ))
            logger.debug(f"{request.provider} answered HTTP {response.status_code}")
            raise ErrorMapper.from_status(request.provider, response.status_code, body, retry_after)

        return HttpxByteStream(response, request.provider)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _read_error_body(self, response: httpx.Response) -> str:
        chunks = []
        size = 0
        try:
            async for chunk in response.aiter_bytes():
                chunks.append(chunk)
                size += len(chunk)
                if size >= ERROR_BODY_LIMIT:
                    break
        except httpx.HTTPError as e:
            logger.debug(f"Could not read error body: {e}")
        return b"".join(chunks)[:ERROR_BODY_LIMIT].decode("utf-8", errors="replace")
