import logging
from typing import Any, List

from ...models.events import ProviderEvent
from ..parsers import SSEFrameParser

logger = logging.getLogger(__name__)

TERMINAL_FINISH_REASONS = ("stop", "length")


class DashScopeParser(SSEFrameParser):
    """
    Parser for DashScope text-generation streams.

    By default DashScope repeats the whole generated text in every record
    (``output.text``) and only the newly appended suffix becomes a content
    event. With ``incremental_output`` requested each record holds just the
    new piece, which is emitted as is.
    """

    def __init__(self, provider: str, incremental: bool = False):
        super().__init__(provider)
        self.incremental = incremental
        self._emitted = ""

    def interpret(self, record: Any) -> List[ProviderEvent]:
        if not isinstance(record, dict):
            return []

        if record.get("code") and record.get("message") and not record.get("output"):
            return [ProviderEvent.error(f"{record['code']}: {record['message']}", raw=record, provider=self.provider)]

        output = record.get("output") or {}
        text = output.get("text")
        if text is None:
            choices = output.get("choices") or []
            if choices:
                text = (choices[0].get("message") or {}).get("content")
                output = {**output, "finish_reason": choices[0].get("finish_reason") or output.get("finish_reason")}

        events: List[ProviderEvent] = []
        if text:
            delta = self._delta(text)
            if delta:
                events.append(ProviderEvent.content(delta, raw=record, provider=self.provider))

        if output.get("finish_reason") in TERMINAL_FINISH_REASONS:
            events.append(ProviderEvent.done(raw=record, provider=self.provider))
        return events

    def reset(self) -> None:
        super().reset()
        self._emitted = ""

    def _delta(self, text: str) -> str:
        if self.incremental:
            self._emitted += text
            return text
        previous, self._emitted = self._emitted, text
        if text.startswith(previous):
            return text[len(previous):]
        # Emitted text is never taken back; later records extend the new text
        logger.warning(f"[provider={self.provider}] Cumulative record rewrote earlier text; skipping it")
        return ""
