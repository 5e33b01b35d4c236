from typing import Any, List

from ...models.events import ProviderEvent
from ..parsers import JsonObjectFrameParser


class OllamaChatParser(JsonObjectFrameParser):
    """Parser for Ollama's stream of bare JSON objects."""

    def interpret(self, record: Any) -> List[ProviderEvent]:
        if not isinstance(record, dict):
            return []

        if record.get("error"):
            return [ProviderEvent.error(str(record["error"]), raw=record, provider=self.provider)]

        events: List[ProviderEvent] = []
        message = record.get("message") or {}
        # /api/generate streams "response" instead of "message"
        content = message.get("content") if message else record.get("response")
        if content or message.get("thinking"):
            events.append(ProviderEvent.content(content, raw=record, provider=self.provider))

        if record.get("done") is True:
            events.append(ProviderEvent.done(raw=record, provider=self.provider))
        return events
