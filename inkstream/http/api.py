"""FastAPI HTTP endpoints for Inkstream.

``POST /stream`` runs one generation session and relays its callbacks as
server-sent events::

    data: {"type": "stream", "answer_text": ..., "document": {...}, ...}
    data: {"type": "complete", ...}   or   data: {"type": "error", "error": {...}, ...}
    data: [DONE]

A client disconnect cancels the session.
"""

import asyncio
import json
from typing import Any, Dict, Optional

try:
    from fastapi import APIRouter, HTTPException
    from fastapi.responses import StreamingResponse
except ImportError:
    raise ImportError(
        "FastAPI is required for HTTP endpoints. "
        "Please install with: pip install inkstream-sdk"
    )

from ..config.settings import StreamSettings
from ..credentials import CredentialSource
from ..models.generation import GenerationRequest
from ..providers.base import ProviderError
from ..providers.registry import list_providers
from ..session.session import start_session
from ..streaming.throttle import UpdateThrottle
from ..transport.base import ByteTransport


def _error_payload(error: ProviderError) -> Dict[str, Any]:
    return {
        "kind": error.kind.value,
        "message": error.message,
        "provider": error.provider,
        "status_code": error.status_code,
        "retryable": error.is_retryable,
    }


def create_router(
    transport: Optional[ByteTransport] = None,
    credentials: Optional[CredentialSource] = None,
    throttle: Optional[UpdateThrottle] = None,
    settings: Optional[StreamSettings] = None,
) -> APIRouter:
    """
    Build the API router.

    Args:
        transport: Byte transport shared by all sessions (httpx per session when omitted)
        credentials: Credential source (environment when omitted)
        throttle: Update throttle shared by all sessions
        settings: Stream settings (environment when omitted)

    Returns:
        APIRouter with ``POST /stream`` and ``GET /providers``
    """
    router = APIRouter()

    @router.get("/providers")
    async def providers():
        """List the built-in providers."""
        return {"providers": list_providers()}

    @router.post("/stream")
    async def stream(body: GenerationRequest):
        """Stream one generation as server-sent events."""
        queue: asyncio.Queue = asyncio.Queue()

        def on_stream(answer_text, snapshot):
            queue.put_nowait({"type": "stream", **snapshot.to_dict()})

        def on_complete(answer_text, snapshot):
            queue.put_nowait({"type": "complete", **snapshot.to_dict()})
            queue.put_nowait(None)

        def on_error(error, snapshot):
            queue.put_nowait({"type": "error", "error": _error_payload(error), **snapshot.to_dict()})
            queue.put_nowait(None)

        try:
            handle = start_session(
                body.to_options(on_stream=on_stream, on_complete=on_complete, on_error=on_error),
                transport=transport,
                credentials=credentials,
                throttle=throttle,
                settings=settings,
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        async def event_stream():
            try:
                while True:
                    item = await queue.get()
                    if item is None:
                        break
                    yield f"data: {json.dumps(item, ensure_ascii=False)}\n\n"
                yield "data: [DONE]\n\n"
            finally:
                # No-op once the session is terminal; cancels it on client disconnect
                handle.cancel()

        return StreamingResponse(
            event_stream(),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache"}
        )

    return router


router = create_router()
