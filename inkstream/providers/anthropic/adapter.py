from typing import Any, Dict, Optional

from ...models.generation import GenerationOptions
from ..base import ProviderAdapter, ProviderFrameParser
from ..registry import register_provider
from .parsers import MessagesStreamParser

ANTHROPIC_VERSION = "2023-06-01"


@register_provider("anthropic")
class AnthropicAdapter(ProviderAdapter):
    """Anthropic Messages API over server-sent events."""

    def build_headers(self, credential: Optional[str]) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
            "anthropic-version": ANTHROPIC_VERSION,
        }
        if credential:
            headers["x-api-key"] = credential
        return headers

    def build_payload(self, options: GenerationOptions) -> Dict[str, Any]:
        # max_tokens is mandatory for this API
        payload: Dict[str, Any] = {
            "model": self.resolve_model(options),
            "max_tokens": self.resolve_max_tokens(options) or 4096,
            "messages": [{"role": "user", "content": options.prompt}],
            "stream": True,
        }
        temperature = self.resolve_temperature(options)
        if temperature is not None:
            payload["temperature"] = min(temperature, 1.0)
        return payload

    def create_parser(self) -> ProviderFrameParser:
        return MessagesStreamParser(self.name)
