import logging
import re
from typing import Any, Dict, Optional

from ...config.providers import ProviderConfig
from ...models.generation import CustomProviderConfig, GenerationOptions
from ..base import ProviderAdapter, ProviderFrameParser
from ..registry import register_provider
from .parsers import ChatCompletionsParser

logger = logging.getLogger(__name__)


def build_chat_payload(
    model: str,
    prompt: str,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
) -> Dict[str, Any]:
    """Streaming ``chat/completions`` body. Unset sampling values are omitted."""
    payload: Dict[str, Any] = {
        "model": model,
        "messages": [{"role": "user", "content": prompt}],
        "stream": True,
    }
    if temperature is not None:
        payload["temperature"] = temperature
    if max_tokens is not None:
        payload["max_tokens"] = max_tokens
    return payload


def normalize_endpoint(base_url: str) -> str:
    """
    Turn a user-supplied base URL into a ``chat/completions`` endpoint.

    ``https://host`` → ``https://host/v1/chat/completions``,
    ``https://host/v2`` → ``https://host/v2/chat/completions``; URLs that
    already point at ``/chat/completions`` are kept as they are.
    """
    url = base_url.strip().rstrip("/")
    if "/chat/completions" in url:
        return url
    if re.search(r"/v\d+$", url):
        return f"{url}/chat/completions"
    return f"{url}/v1/chat/completions"


@register_provider("openai", "zhipu", "siliconflow")
class OpenAICompatibleAdapter(ProviderAdapter):
    """OpenAI ``chat/completions`` wire format and the providers that clone it."""

    def build_payload(self, options: GenerationOptions) -> Dict[str, Any]:
        return build_chat_payload(
            model=self.resolve_model(options),
            prompt=options.prompt,
            temperature=self.resolve_temperature(options),
            max_tokens=self.resolve_max_tokens(options),
        )

    def create_parser(self) -> ProviderFrameParser:
        return ChatCompletionsParser(self.name)


@register_provider("deepseek")
class DeepSeekAdapter(OpenAICompatibleAdapter):
    """DeepSeek accepts only its own model names."""

    def resolve_model(self, options: GenerationOptions) -> str:
        model = super().resolve_model(options)
        if model not in self.config.supported_models:
            logger.warning(f"DeepSeek does not serve model '{model}', using {self.config.default_model}")
            return self.config.default_model
        return model


class CustomEndpointAdapter(OpenAICompatibleAdapter):
    """User-defined OpenAI-compatible endpoint (``custom_*`` provider ids)."""

    def __init__(self, custom: CustomProviderConfig):
        super().__init__(ProviderConfig(
            name=custom.id,
            display_name=custom.name,
            api_endpoint=normalize_endpoint(custom.base_url),
            default_model=custom.default_model,
            supported_models=list(custom.models),
            supports_thinking=True,
            requires_credential=False,
            reasoning_fields=(
                "choices.0.delta.reasoning_content",
                "choices.0.delta.thinking",
            ),
        ))
        self.custom = custom

    @property
    def inline_credential(self) -> Optional[str]:
        return self.custom.api_key or None
