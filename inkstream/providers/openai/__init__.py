from .adapter import CustomEndpointAdapter, DeepSeekAdapter, OpenAICompatibleAdapter, normalize_endpoint
from .parsers import ChatCompletionsParser

__all__ = [
    "OpenAICompatibleAdapter",
    "DeepSeekAdapter",
    "CustomEndpointAdapter",
    "ChatCompletionsParser",
    "normalize_endpoint",
]
