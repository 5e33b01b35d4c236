from typing import Any, Dict, Optional

from ...models.generation import GenerationOptions
from ..base import ProviderAdapter, ProviderFrameParser
from ..registry import register_provider
from .parsers import DashScopeParser


@register_provider("alibaba")
class DashScopeAdapter(ProviderAdapter):
    """Alibaba DashScope text-generation API."""

    # Records repeat the whole text unless incremental output is requested
    incremental_output = False

    def build_headers(self, credential: Optional[str]) -> Dict[str, str]:
        headers = super().build_headers(credential)
        headers["X-DashScope-SSE"] = "enable"
        return headers

    def build_payload(self, options: GenerationOptions) -> Dict[str, Any]:
        parameters: Dict[str, Any] = {"stream": True, "incremental_output": self.incremental_output}
        temperature = self.resolve_temperature(options)
        if temperature is not None:
            parameters["temperature"] = temperature
        max_tokens = self.resolve_max_tokens(options)
        if max_tokens is not None:
            parameters["max_tokens"] = max_tokens
        return {
            "model": self.resolve_model(options),
            "input": {"messages": [{"role": "user", "content": options.prompt}]},
            "parameters": parameters,
        }

    def create_parser(self) -> ProviderFrameParser:
        return DashScopeParser(self.name, incremental=self.incremental_output)
