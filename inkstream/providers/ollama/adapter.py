import os
from typing import Any, Dict, Optional

from ...models.generation import GenerationOptions
from ..base import ProviderAdapter, ProviderFrameParser, RequestSpec
from ..registry import register_provider
from .parsers import OllamaChatParser


@register_provider("ollama")
class OllamaAdapter(ProviderAdapter):
    """Local Ollama server. No credential; honours ``OLLAMA_HOST``."""

    def build_request(self, options: GenerationOptions, credential: Optional[str]) -> RequestSpec:
        spec = super().build_request(options, credential)
        host = os.getenv("OLLAMA_HOST")
        if host:
            if not host.startswith(("http://", "https://")):
                host = f"http://{host}"
            spec.url = f"{host.rstrip('/')}/api/chat"
        return spec

    def build_headers(self, credential: Optional[str]) -> Dict[str, str]:
        headers = super().build_headers(credential)
        headers["Accept"] = "application/x-ndjson"
        return headers

    def build_payload(self, options: GenerationOptions) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.resolve_model(options),
            "messages": [{"role": "user", "content": options.prompt}],
            "stream": True,
        }
        model_options: Dict[str, Any] = {}
        temperature = self.resolve_temperature(options)
        if temperature is not None:
            model_options["temperature"] = temperature
        max_tokens = self.resolve_max_tokens(options)
        if max_tokens is not None:
            model_options["num_predict"] = max_tokens
        if model_options:
            payload["options"] = model_options
        return payload

    def create_parser(self) -> ProviderFrameParser:
        return OllamaChatParser(self.name)
