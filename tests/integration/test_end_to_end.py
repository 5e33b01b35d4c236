"""
End-to-end tests: a session over the real httpx transport, with the provider
answered by an in-process ``httpx.MockTransport``.
"""

import json

import httpx
import pytest

from inkstream import GenerationOptions, start_session
from inkstream.streaming.throttle import UpdateThrottle
from inkstream.transport.httpx_transport import HttpxTransport
from tests.helpers.streaming_mocks import anthropic_stream, openai_chunk, split_bytes

pytestmark = pytest.mark.integration


def sse(*records):
    return "".join(f"data: {json.dumps(record)}\n\n" for record in records)


PROVIDER_BODIES = {
    "openai": (
        openai_chunk("Streaming ") + openai_chunk("works.") + openai_chunk(finish_reason="stop")
        + "data: [DONE]\n\n"
    ),
    "anthropic": "".join(anthropic_stream(["Streaming ", "works."], thinking_parts=["Plan it out."])),
    "alibaba": sse(
        {"output": {"text": "Streaming ", "finish_reason": "null"}},
        {"output": {"text": "Streaming works.", "finish_reason": "stop"}},
    ),
    "ollama": (
        '{"message": {"role": "assistant", "content": "Streaming "}, "done": false}\n'
        '{"message": {"role": "assistant", "content": "works."}, "done": false}\n'
        '{"message": {"role": "assistant", "content": ""}, "done": true}\n'
    ),
}


class ChunkedStream(httpx.AsyncByteStream):
    """Response body delivered in small, character-unaligned pieces."""

    def __init__(self, body, size=7):
        self.pieces = split_bytes(body, size)

    async def __aiter__(self):
        for piece in self.pieces:
            yield piece


def http_transport(body, status_code=200, seen=None):
    def handler(request):
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, stream=ChunkedStream(body))
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxTransport(client=client), client


class TestEndToEnd:
    """Full pipeline over HTTP."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("provider_id", sorted(PROVIDER_BODIES))
    async def test_provider_stream(self, provider_id, credentials, settings, monkeypatch):
        monkeypatch.delenv("OLLAMA_HOST", raising=False)
        seen = []
        transport, client = http_transport(PROVIDER_BODIES[provider_id], seen=seen)
        updates = []

        handle = start_session(
            GenerationOptions(
                prompt="Does streaming work?",
                provider_id=provider_id,
                on_stream=lambda text, snap: updates.append(text),
            ),
            transport=transport,
            credentials=credentials,
            throttle=UpdateThrottle(min_interval=0.0),
            settings=settings,
        )
        snapshot = await handle.wait()
        await client.aclose()

        assert snapshot.status == "completed"
        assert snapshot.answer_text == "Streaming works."
        assert snapshot.document.plain_text() == "Streaming works."
        assert updates
        assert len(seen) == 1
        if provider_id == "anthropic":
            assert snapshot.thinking_trace.full_text == "Plan it out."

    @pytest.mark.asyncio
    async def test_http_error_surfaces_once(self, credentials, settings):
        transport, client = http_transport('{"error": {"message": "bad key"}}', status_code=401)
        errors = []

        handle = start_session(
            GenerationOptions(
                prompt="hi",
                provider_id="openai",
                on_error=lambda error, snap: errors.append(error),
            ),
            transport=transport,
            credentials=credentials,
            throttle=UpdateThrottle(min_interval=0.0),
            settings=settings,
        )
        snapshot = await handle.wait()
        await client.aclose()

        assert snapshot.status == "failed"
        assert len(errors) == 1
        assert errors[0].status_code == 401
        assert "bad key" in errors[0].message

    @pytest.mark.asyncio
    async def test_reasoning_model_with_tags(self, credentials, settings):
        body = (
            openai_chunk("<thin") + openai_chunk("k>Check the units first.</th")
            + openai_chunk("ink>\n\nThe result is 42.") + "data: [DONE]\n\n"
        )
        transport, client = http_transport(body)

        handle = start_session(
            GenerationOptions(prompt="hi", provider_id="siliconflow"),
            transport=transport,
            credentials=credentials,
            throttle=UpdateThrottle(min_interval=0.0),
            settings=settings,
        )
        snapshot = await handle.wait()
        await client.aclose()

        assert snapshot.answer_text == "The result is 42."
        assert snapshot.reasoning_text == "Check the units first."
        assert snapshot.thinking_trace.is_complete
