"""
Provider Adapters Layer

This layer contains the wire-format adapters for every supported provider
family. Each adapter builds the streaming request and hands out a frame parser
that turns the provider's records into normalized ``ProviderEvent``s.
"""

from .base import ErrorKind, ProviderAdapter, ProviderError, ProviderFrameParser, RequestSpec
from .errors import (
    ClassificationError,
    CredentialError,
    DecodeError,
    ErrorMapper,
    FrameParseError,
    PipelineError,
    ProviderSignaledError,
    TransportError,
)
from .registry import get_adapter, list_providers, register_provider, registered_provider_ids
from .openai.adapter import CustomEndpointAdapter, DeepSeekAdapter, OpenAICompatibleAdapter
from .anthropic.adapter import AnthropicAdapter
from .alibaba.adapter import DashScopeAdapter
from .ollama.adapter import OllamaAdapter

__all__ = [
    "ErrorKind",
    "ProviderAdapter",
    "ProviderError",
    "ProviderFrameParser",
    "RequestSpec",
    "ClassificationError",
    "CredentialError",
    "DecodeError",
    "ErrorMapper",
    "FrameParseError",
    "PipelineError",
    "ProviderSignaledError",
    "TransportError",
    "get_adapter",
    "list_providers",
    "register_provider",
    "registered_provider_ids",
    "OpenAICompatibleAdapter",
    "DeepSeekAdapter",
    "CustomEndpointAdapter",
    "AnthropicAdapter",
    "DashScopeAdapter",
    "OllamaAdapter",
]
