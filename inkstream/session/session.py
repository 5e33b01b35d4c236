"""
Generation sessions.

A session drives one request end to end:

    bytes → decoder → frame parser → classifier → {reasoning, markdown} → throttle → callbacks

It owns the state machine (idle → streaming → completed/failed/cancelled), the
pre-first-byte retry loop and the callback contract:

- ``on_stream(answer_text, snapshot)``: throttled intermediate updates
- ``on_complete(answer_text, snapshot)``: exactly once on success, unthrottled
- ``on_error(error, snapshot)``: exactly once on failure, with partial output

Nothing fires after ``cancel()``. Callbacks may be plain functions or
coroutine functions; exceptions they raise are logged and otherwise ignored.
"""

import asyncio
import inspect
import time
import uuid
from typing import Any, Awaitable, Callable, Optional

from ..config.settings import StreamSettings
from ..credentials import CredentialSource, EnvCredentialSource
from ..models.events import EventKind, ProviderEvent, StreamSnapshot, ThinkingTrace
from ..models.document import RenderedDocument
from ..models.generation import GenerationOptions
from ..observability.logging import SessionLogger
from ..providers.base import ErrorKind, ProviderAdapter, ProviderError, RequestSpec
from ..providers.errors import (
    CredentialError,
    ErrorMapper,
    PipelineError,
    ProviderSignaledError,
    TransportError,
)
from ..providers.registry import get_adapter
from ..streaming.decoder import ByteStreamDecoder
from ..streaming.markdown import IncrementalMarkdownConverter
from ..streaming.reasoning import ReasoningAccumulator
from ..streaming.throttle import UpdateThrottle, get_default_throttle
from ..transport.base import ByteStream, ByteTransport
from .retry import RetryPolicy, SessionRetryConfig
from .state import GenerationState, SessionStatus


class GenerationSession:
    """One streamed generation. Use ``start_session`` rather than building this directly."""

    def __init__(
        self,
        options: GenerationOptions,
        adapter: ProviderAdapter,
        transport: ByteTransport,
        credentials: CredentialSource,
        throttle: UpdateThrottle,
        settings: Optional[StreamSettings] = None,
        retry_config: Optional[SessionRetryConfig] = None,
        session_id: Optional[str] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.options = options
        self.adapter = adapter
        self.transport = transport
        self.credentials = credentials
        self.throttle = throttle
        self.settings = settings or StreamSettings()
        self.retry_policy = RetryPolicy(retry_config or SessionRetryConfig.from_settings(self.settings))
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self._sleep = sleep

        self.state = GenerationState()
        self.decoder = ByteStreamDecoder(self.settings.encoding, provider=adapter.name)
        self.parser = adapter.create_parser()
        self.classifier = adapter.create_classifier(self.settings)
        self.reasoning = ReasoningAccumulator()
        self.converter = IncrementalMarkdownConverter()

        self.model = adapter.resolve_model(options)
        self.log = SessionLogger(adapter.name, self.session_id, self.model)
        self.attempts = 0
        self.final_snapshot: Optional[StreamSnapshot] = None
        self._cancelled = False
        self._dirty = False
        self._started_at: Optional[float] = None
        self._task: Optional["asyncio.Task"] = None

    @property
    def status(self) -> SessionStatus:
        return self.state.status

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    async def run(self) -> Optional[StreamSnapshot]:
        """
        Run the session to a terminal state.

        Returns:
            The final snapshot (completed or failed), or None when cancelled
        """
        self._task = asyncio.current_task()
        self._started_at = time.monotonic()
        self.state.transition(SessionStatus.STREAMING)
        self.log.debug("Session started")

        try:
            await self._run_attempts()
            if not self._cancelled:
                await self._complete()
        except asyncio.CancelledError:
            self.mark_cancelled()
            raise
        except ProviderError as e:
            await self._fail(e)
        except Exception as e:
            error = PipelineError(f"Unexpected pipeline failure: {e}", provider=self.adapter.name)
            error.original_error = e
            await self._fail(error)
        return self.final_snapshot

    def cancel(self) -> bool:
        """
        Cancel the session. Idempotent; a no-op once the session is terminal.

        Returns:
            bool: True if this call cancelled the session
        """
        if not self.mark_cancelled():
            return False
        if self._task is not None and not self._task.done():
            self._task.cancel()
        return True

    def mark_cancelled(self) -> bool:
        if self._cancelled or self.state.status.is_terminal:
            return False
        self._cancelled = True
        self.state.last_error = ErrorKind.CANCELLED
        self.state.transition(SessionStatus.CANCELLED)
        self.throttle.release(self.session_id)
        self.log.info(
            "Session cancelled",
            chunks=self.state.chunks_received,
            answer_chars=len(self.state.answer_text),
        )
        return True

    def snapshot(
        self,
        answer_text: Optional[str] = None,
        document: Optional[RenderedDocument] = None,
        thinking_trace: Optional[ThinkingTrace] = None,
    ) -> StreamSnapshot:
        """Immutable view of the current session state."""
        state = self.state
        if thinking_trace is None and self.reasoning.has_started and not state.is_done:
            thinking_trace = self.reasoning.placeholder()
        return StreamSnapshot(
            session_id=self.session_id,
            status=state.status.value,
            answer_text=state.answer_text if answer_text is None else answer_text,
            reasoning_text=state.reasoning_text,
            is_streaming=state.is_streaming,
            is_done=state.is_done,
            is_thinking=(
                self.reasoning.has_started and not state.answer_text and not state.is_done
            ),
            thinking_trace=thinking_trace,
            document=document,
            error_kind=state.last_error.value if state.last_error else None,
            metadata={
                "provider": self.adapter.name,
                "model": self.model,
                "attempts": self.attempts,
                "bytes_received": state.bytes_received,
            },
        )

    async def _run_attempts(self) -> None:
        request = self.adapter.build_request(self.options, self._resolve_credential())

        while True:
            self.attempts += 1
            try:
                await self._stream_once(request)
                return
            except TransportError as e:
                if not self.retry_policy.should_retry(e, self.attempts, self.state.bytes_received):
                    raise
                delay = self.retry_policy.compute_delay(self.attempts, e)
                self.log.log_retry(self.attempts, self.retry_policy.config.max_attempts, delay, e)
                await self._sleep(delay)

    def _resolve_credential(self) -> Optional[str]:
        credential = self.adapter.inline_credential or self.credentials.get_credential(self.adapter.name)
        if credential is None and self.adapter.requires_credential:
            hint = self.adapter.config.credential_env_var
            raise CredentialError(
                f"No credential configured for provider '{self.adapter.name}'"
                + (f" (set {hint})" if hint else ""),
                provider=self.adapter.name,
            )
        return credential

    async def _stream_once(self, request: RequestSpec) -> None:
        stream = await self._open(request)
        iterator = stream.__aiter__()
        try:
            while True:
                try:
                    chunk = await iterator.__anext__()
                except StopAsyncIteration:
                    break
                except ProviderError:
                    raise
                except Exception as e:
                    raise ErrorMapper.map_transport_error(e, self.adapter.name) from e

                if await self._handle_chunk(chunk):
                    return

            # End of transport without a completion sentinel: drain buffers
            tail = self.decoder.flush()
            events = self.parser.parse(tail) if tail else []
            events.extend(self.parser.flush())
            await self._handle_events(events)
        finally:
            await self._close(stream, iterator)

    async def _open(self, request: RequestSpec) -> ByteStream:
        try:
            return await self.transport.open(request)
        except ProviderError:
            raise
        except Exception as e:
            raise ErrorMapper.map_transport_error(e, self.adapter.name) from e

    async def _close(self, stream: ByteStream, iterator: Any = None) -> None:
        # An iterator left suspended after an early stop is closed with the stream
        closers = [getattr(iterator, "aclose", None), stream.aclose]
        for close in closers:
            if close is None:
                continue
            try:
                await close()
            except Exception as e:
                self.log.debug(f"Ignoring error while closing stream: {e}")

    async def _handle_chunk(self, chunk: bytes) -> bool:
        """Process one raw chunk. Returns True once the provider signalled completion."""
        self.state.record_chunk(len(chunk))
        text = self.decoder.append(chunk)
        if not text:
            return False
        return await self._handle_events(self.parser.parse(text))

    async def _handle_events(self, events) -> bool:
        done = False
        for event in events:
            if event.kind == EventKind.DONE:
                done = True
                break
            if event.kind == EventKind.ERROR:
                raise ProviderSignaledError(
                    f"{self.adapter.name} reported an error: {event.text}",
                    provider=self.adapter.name,
                )
            self._apply(event)

        if not done and self._dirty:
            await self._emit_progress()
        return done

    def _apply(self, event: ProviderEvent) -> None:
        delta = self.classifier.classify(event)
        if delta.is_empty:
            return
        if delta.reasoning_delta:
            self.state.append_reasoning(delta.reasoning_delta)
            self.reasoning.append(delta.reasoning_delta)
        if delta.answer_delta:
            self.state.append_answer(delta.answer_delta)
        self._dirty = True

    async def _emit_progress(self) -> None:
        if self._cancelled or not self.throttle.should_emit(self.session_id, is_terminal=False):
            return
        self._dirty = False
        answer_text = self.state.answer_text
        document = self.converter.convert(answer_text)
        await self._invoke("on_stream", answer_text, self.snapshot(document=document))

    async def _complete(self) -> None:
        split = self.classifier.finalize(self.state.answer_text)
        if split.reassigned:
            self.state.append_reasoning(split.reasoning_text)
            self.reasoning.append(split.reasoning_text)
        final_answer = split.answer_text

        trace = self.reasoning.finalize()
        document = self.converter.convert(final_answer, final=True)
        self.state.transition(SessionStatus.COMPLETED)
        self.throttle.should_emit(self.session_id, is_terminal=True)

        snapshot = self.snapshot(answer_text=final_answer, document=document, thinking_trace=trace)
        self.final_snapshot = snapshot

        self.log.log_streaming_metrics(
            chunks=self.state.chunks_received,
            bytes_received=self.state.bytes_received,
            answer_chars=len(final_answer),
            reasoning_chars=len(trace.full_text) if trace else 0,
            duration=time.monotonic() - (self._started_at or time.monotonic()),
            attempts=self.attempts,
        )
        await self._invoke("on_complete", final_answer, snapshot)

    async def _fail(self, error: ProviderError) -> None:
        if self._cancelled or self.state.status.is_terminal:
            return
        error.partial_answer = self.state.answer_text
        error.partial_reasoning = self.state.reasoning_text
        self.state.last_error = error.kind
        self.state.transition(SessionStatus.FAILED)
        self.throttle.release(self.session_id)

        snapshot = self.snapshot(document=self.converter.convert(self.state.answer_text))
        self.final_snapshot = snapshot
        self.log.error(
            "Session failed",
            error=error,
            kind=error.kind.value,
            attempts=self.attempts,
            partial_chars=len(self.state.answer_text),
        )
        await self._invoke("on_error", error, snapshot)

    async def _invoke(self, name: str, *args: Any) -> None:
        callback = getattr(self.options, name)
        if callback is None or self._cancelled:
            return
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.log.error(f"{name} callback raised", error=e)


class SessionHandle:
    """Caller-side handle on a running session."""

    def __init__(self, session: GenerationSession, task: "asyncio.Task"):
        self._session = session
        self._task = task

    @property
    def session_id(self) -> str:
        return self._session.session_id

    @property
    def status(self) -> SessionStatus:
        return self._session.status

    @property
    def session(self) -> GenerationSession:
        return self._session

    @property
    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> bool:
        """Cancel the session. Safe to call any number of times."""
        return self._session.cancel()

    async def wait(self) -> Optional[StreamSnapshot]:
        """
        Wait until the session reaches a terminal state.

        Returns:
            The final snapshot, or None if the session was cancelled
        """
        await asyncio.wait({self._task})
        if self._task.cancelled():
            return None
        return self._task.result()


def start_session(
    options: GenerationOptions,
    *,
    transport: Optional[ByteTransport] = None,
    credentials: Optional[CredentialSource] = None,
    throttle: Optional[UpdateThrottle] = None,
    settings: Optional[StreamSettings] = None,
    adapter: Optional[ProviderAdapter] = None,
    retry_config: Optional[SessionRetryConfig] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> SessionHandle:
    """
    Start a generation session on the running event loop.

    Args:
        options: Prompt, provider selection, sampling options and callbacks
        transport: Byte transport; an httpx transport is created when omitted
        credentials: Credential source; environment variables when omitted
        throttle: Shared update throttle; the process-wide one for
            ``settings.throttle_interval`` when omitted
        settings: Stream settings; read from the environment when omitted
        adapter: Explicit adapter, overriding the registry lookup
        retry_config: Retry policy override
        sleep: Backoff sleep (injectable for tests)

    Returns:
        SessionHandle for cancellation and waiting

    Raises:
        ValueError: Unknown provider id
    """
    settings = settings or StreamSettings.from_env()
    adapter = adapter or get_adapter(options.provider_id, options.custom_provider)
    owns_transport = transport is None
    if transport is None:
        from ..transport.httpx_transport import HttpxTransport
        transport = HttpxTransport(settings=settings)

    session = GenerationSession(
        options=options,
        adapter=adapter,
        transport=transport,
        credentials=credentials or EnvCredentialSource(),
        throttle=throttle or get_default_throttle(settings.throttle_interval),
        settings=settings,
        retry_config=retry_config,
        sleep=sleep,
    )

    async def _run() -> Optional[StreamSnapshot]:
        try:
            return await session.run()
        finally:
            if owns_transport:
                await transport.aclose()

    task = asyncio.get_running_loop().create_task(_run())
    session._task = task
    return SessionHandle(session, task)
