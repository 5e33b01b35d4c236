"""
Base Provider Interfaces

This module defines the capability pair every provider family implements:
a ``ProviderFrameParser`` that turns decoded text into ``ProviderEvent``s, and a
``ProviderAdapter`` that builds the HTTP request and hands out per-session
parser and classifier instances.

Adapters are closed, tagged variants: adding a provider means adding a
subclass registered with ``@register_provider``, never editing a dispatcher.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from ..config.providers import ProviderConfig
from ..config.settings import StreamSettings
from ..models.events import ProviderEvent
from ..models.generation import GenerationOptions

if TYPE_CHECKING:
    from ..streaming.classifier import ContentClassifier


class ErrorKind(str, Enum):
    """Normalized error kinds exposed to callers."""
    DECODE = "decode"
    FRAME_PARSE = "frame_parse"
    CLASSIFICATION = "classification"
    TRANSPORT = "transport"
    PROVIDER_SIGNALED = "provider_signaled"
    CREDENTIAL = "credential"
    CANCELLED = "cancelled"
    INTERNAL = "internal"


class ProviderError(Exception):
    """
    Base exception for everything the pipeline can raise.

    Attributes:
        message: Human-readable error message
        provider: Provider name
        status_code: HTTP status code if applicable
        retry_after: Seconds to wait before retry if applicable
        is_retryable: Whether the session may retry the request
        original_error: The wrapped exception, if any
        partial_answer: Answer text accumulated before the failure
        partial_reasoning: Reasoning text accumulated before the failure
    """

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.retry_after = retry_after
        self.is_retryable = False  # Set by ErrorMapper
        self.original_error: Optional[BaseException] = None
        self.partial_answer: str = ""
        self.partial_reasoning: str = ""


@dataclass
class RequestSpec:
    """Everything the transport needs to open one streaming request."""
    url: str
    provider: str
    json_body: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    method: str = "POST"


class ProviderFrameParser(ABC):
    """
    Turns decoded text fragments into provider events.

    ``parse`` is called once per decoded fragment; a fragment may hold a partial
    record, one record or several. Implementations own their framing buffer and
    must never let one malformed record swallow the records after it.
    """

    def __init__(self, provider: str):
        self.provider = provider
        self.records_parsed = 0
        self.records_skipped = 0

    @abstractmethod
    def parse(self, text: str) -> List[ProviderEvent]:
        """Consume a decoded fragment and return the events it completed."""

    def flush(self) -> List[ProviderEvent]:
        """Drain any buffered, unterminated record at end of stream."""
        return []

    def reset(self) -> None:
        self.records_parsed = 0
        self.records_skipped = 0


class ProviderAdapter(ABC):
    """
    Abstract base class for provider families.

    The adapter is responsible for:
    - Translating GenerationOptions into the provider's request body
    - Building authentication headers
    - Creating a fresh frame parser and content classifier per session

    Adapters hold no per-session state themselves.
    """

    def __init__(self, config: ProviderConfig):
        self.config = config

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def requires_credential(self) -> bool:
        return self.config.requires_credential

    @property
    def inline_credential(self) -> Optional[str]:
        """Credential carried by the provider definition itself, if any."""
        return None

    def resolve_model(self, options: GenerationOptions) -> str:
        return options.model or self.config.default_model

    def resolve_temperature(self, options: GenerationOptions) -> Optional[float]:
        if options.temperature is not None:
            return options.temperature
        return self.config.default_temperature

    def resolve_max_tokens(self, options: GenerationOptions) -> Optional[int]:
        return options.max_tokens or self.config.default_max_tokens

    def build_request(self, options: GenerationOptions, credential: Optional[str]) -> RequestSpec:
        """Build the streaming request for ``options``."""
        return RequestSpec(
            url=self.config.api_endpoint,
            provider=self.name,
            json_body=self.build_payload(options),
            headers=self.build_headers(credential),
        )

    def build_headers(self, credential: Optional[str]) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }
        if credential:
            headers["Authorization"] = f"Bearer {credential}"
        return headers

    @abstractmethod
    def build_payload(self, options: GenerationOptions) -> Dict[str, Any]:
        """Provider-specific request body."""

    @abstractmethod
    def create_parser(self) -> ProviderFrameParser:
        """A fresh parser for one session."""

    def create_classifier(self, settings: Optional[StreamSettings] = None) -> "ContentClassifier":
        """A fresh classifier for one session."""
        from ..streaming.classifier import ContentClassifier

        settings = settings or StreamSettings()
        return ContentClassifier(
            reasoning_fields=self.config.reasoning_fields,
            min_tag_content_length=settings.min_tag_content_length,
        )

    def describe(self) -> Dict[str, Any]:
        return {
            "id": self.name,
            "display_name": self.config.display_name,
            "default_model": self.config.default_model,
            "supported_models": list(self.config.supported_models),
            "supports_thinking": self.config.supports_thinking,
            "requires_credential": self.requires_credential,
        }
