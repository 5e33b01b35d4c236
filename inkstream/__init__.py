"""
Inkstream - streaming LLM output normalization.

This package turns the chunked, provider-specific streams of several LLM HTTP
APIs into one normalized output:
- OpenAI-compatible APIs (OpenAI, DeepSeek, Zhipu, SiliconFlow, custom endpoints)
- Anthropic Messages
- Alibaba DashScope
- Ollama

Features:
- Byte-safe incremental decoding and record framing
- Answer/reasoning separation (provider fields and <think>-style tags)
- Incremental markdown → document conversion
- Throttled updates with a guaranteed final flush
- Cancellation and pre-first-byte retries
"""

__version__ = "0.1.0"

from .config import StreamSettings
from .credentials import CredentialSource, EnvCredentialSource, StaticCredentialSource
from .models import (
    CustomProviderConfig,
    DocumentNode,
    GenerationOptions,
    GenerationRequest,
    RenderedDocument,
    StreamSnapshot,
    ThinkingTrace,
)
from .providers import (
    ErrorKind,
    ProviderError,
    TransportError,
    get_adapter,
    list_providers,
    register_provider,
)
from .streaming import IncrementalMarkdownConverter, UpdateThrottle
from .session import SessionHandle, SessionStatus, start_session

__all__ = [
    # Sessions
    "start_session",
    "SessionHandle",
    "SessionStatus",

    # Configuration
    "StreamSettings",
    "CredentialSource",
    "EnvCredentialSource",
    "StaticCredentialSource",

    # Models
    "CustomProviderConfig",
    "GenerationOptions",
    "GenerationRequest",
    "StreamSnapshot",
    "ThinkingTrace",
    "DocumentNode",
    "RenderedDocument",

    # Providers
    "ErrorKind",
    "ProviderError",
    "TransportError",
    "get_adapter",
    "list_providers",
    "register_provider",

    # Pipeline pieces
    "IncrementalMarkdownConverter",
    "UpdateThrottle",
]
