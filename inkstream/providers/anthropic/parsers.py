from typing import Any, List

from ...models.events import ProviderEvent
from ..parsers import SSEFrameParser


class MessagesStreamParser(SSEFrameParser):
    """Parser for Anthropic Messages API event streams."""

    def interpret(self, record: Any) -> List[ProviderEvent]:
        if not isinstance(record, dict):
            return []

        event_type = record.get("type")
        if event_type == "content_block_delta":
            delta = record.get("delta") or {}
            delta_type = delta.get("type")
            if delta_type == "text_delta":
                return [ProviderEvent.content(delta.get("text"), raw=record, provider=self.provider)]
            if delta_type == "thinking_delta":
                return [ProviderEvent.reasoning(delta.get("thinking"), raw=record, provider=self.provider)]
            return []

        if event_type == "message_stop":
            return [ProviderEvent.done(raw=record, provider=self.provider)]

        if event_type == "error":
            error = record.get("error") or {}
            message = error.get("message") if isinstance(error, dict) else str(error)
            return [ProviderEvent.error(message or "Provider reported an error", raw=record, provider=self.provider)]

        # message_start, content_block_start/stop, message_delta, ping
        return []
