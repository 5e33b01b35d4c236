"""
Generic frame parsers.

Each provider family supplies only ``interpret(record)``: turning one decoded
JSON record into events. Framing, JSON decoding, skip-and-continue on malformed
records and the ``[DONE]`` sentinel live here.
"""

import json
import logging
from abc import abstractmethod
from typing import Any, List

from ..models.events import ProviderEvent
from ..streaming.framing import JsonObjectFramer, SSEFramer, SSEMessage
from .base import ProviderFrameParser
from .errors import FrameParseError

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


class RecordInterpreter(ProviderFrameParser):
    """Shared JSON decoding and error absorption."""

    @abstractmethod
    def interpret(self, record: Any) -> List[ProviderEvent]:
        """Map one decoded record onto zero or more events."""

    def _decode(self, payload: str) -> List[ProviderEvent]:
        payload = payload.strip()
        if not payload:
            return []
        if payload == DONE_SENTINEL:
            self.records_parsed += 1
            return [ProviderEvent.done(provider=self.provider)]
        try:
            record = json.loads(payload)
        except json.JSONDecodeError as e:
            self._skip(payload, e)
            return []
        self.records_parsed += 1
        try:
            return self.interpret(record)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            self._skip(payload, e)
            return []

    def _skip(self, payload: str, cause: Exception) -> None:
        self.records_skipped += 1
        error = FrameParseError(
            message=f"Skipping malformed record: {cause}",
            provider=self.provider,
        )
        error.original_error = cause
        logger.warning(f"[provider={self.provider}] {error.message} (payload={payload[:120]!r})")


class SSEFrameParser(RecordInterpreter):
    """Parser for ``data:``-framed server-sent event streams."""

    def __init__(self, provider: str):
        super().__init__(provider)
        self._framer = SSEFramer()

    def parse(self, text: str) -> List[ProviderEvent]:
        events: List[ProviderEvent] = []
        for message in self._framer.feed(text):
            events.extend(self._handle_message(message))
        return events

    def flush(self) -> List[ProviderEvent]:
        events: List[ProviderEvent] = []
        for message in self._framer.flush():
            events.extend(self._handle_message(message))
        return events

    def reset(self) -> None:
        super().reset()
        self._framer.reset()

    def _handle_message(self, message: SSEMessage) -> List[ProviderEvent]:
        data = message.data
        if len(message.data_lines) <= 1:
            return self._decode(data)

        # Multi-line payload: one JSON value spread over lines, or one per line
        try:
            json.loads(data)
        except json.JSONDecodeError:
            events: List[ProviderEvent] = []
            for line in message.data_lines:
                events.extend(self._decode(line))
            return events
        return self._decode(data)


class JsonObjectFrameParser(RecordInterpreter):
    """Parser for streams of bare JSON objects (newline-delimited or not)."""

    def __init__(self, provider: str):
        super().__init__(provider)
        self._framer = JsonObjectFramer()

    def parse(self, text: str) -> List[ProviderEvent]:
        events: List[ProviderEvent] = []
        for raw in self._framer.feed(text):
            events.extend(self._decode(raw))
        return events

    def flush(self) -> List[ProviderEvent]:
        events: List[ProviderEvent] = []
        for raw in self._framer.flush():
            events.extend(self._decode(raw))
        return events

    def reset(self) -> None:
        super().reset()
        self._framer.reset()
