from typing import Any, List

from ...models.events import ProviderEvent
from ..parsers import SSEFrameParser


class ChatCompletionsParser(SSEFrameParser):
    """Parser for OpenAI-compatible ``chat/completions`` streams.

    Reasoning fields (``reasoning_content``, ``thinking``...) are left on the
    record for the classifier; this parser only surfaces ``delta.content``,
    completion and error payloads.
    """

    def interpret(self, record: Any) -> List[ProviderEvent]:
        if not isinstance(record, dict):
            return []

        error = record.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            return [ProviderEvent.error(message or "Provider reported an error", raw=record, provider=self.provider)]

        choices = record.get("choices") or []
        if not choices:
            return []

        events: List[ProviderEvent] = []
        choice = choices[0]
        delta = choice.get("delta") or choice.get("message") or {}
        if any(value for key, value in delta.items() if key != "role"):
            events.append(ProviderEvent.content(delta.get("content"), raw=record, provider=self.provider))

        if choice.get("finish_reason"):
            events.append(ProviderEvent.done(raw=record, provider=self.provider))
        return events
