"""Event models for the streaming pipeline.

This module defines the records that flow between the pipeline stages:
provider events produced by frame parsers, classified deltas, the reasoning
trace and the immutable snapshot handed to session callbacks.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .document import RenderedDocument


class EventKind(str, Enum):
    """Kinds of logical events a provider stream can carry."""
    CONTENT = "content"
    REASONING = "reasoning"
    DONE = "done"
    ERROR = "error"


@dataclass
class ProviderEvent:
    """A parsed logical unit from a provider stream.

    Attributes:
        kind: What the event carries
        text: Text payload (content/reasoning delta, or error message)
        raw: The decoded provider record, kept for provenance only
        provider: Name of the provider that produced the event
    """
    kind: EventKind
    text: Optional[str] = None
    raw: Any = None
    provider: str = ""

    @classmethod
    def content(cls, text: Optional[str], raw: Any = None, provider: str = "") -> "ProviderEvent":
        return cls(kind=EventKind.CONTENT, text=text, raw=raw, provider=provider)

    @classmethod
    def reasoning(cls, text: Optional[str], raw: Any = None, provider: str = "") -> "ProviderEvent":
        return cls(kind=EventKind.REASONING, text=text, raw=raw, provider=provider)

    @classmethod
    def done(cls, raw: Any = None, provider: str = "") -> "ProviderEvent":
        return cls(kind=EventKind.DONE, raw=raw, provider=provider)

    @classmethod
    def error(cls, message: str, raw: Any = None, provider: str = "") -> "ProviderEvent":
        return cls(kind=EventKind.ERROR, text=message, raw=raw, provider=provider)


@dataclass
class ClassifiedDelta:
    """Answer/reasoning split of a single provider event."""
    answer_delta: Optional[str] = None
    reasoning_delta: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.answer_delta and not self.reasoning_delta


@dataclass(frozen=True)
class ThinkingTrace:
    """The reasoning trace of one generation, always a single whole.

    Attributes:
        summary: Short human-readable description of the trace
        full_text: The complete (trimmed) reasoning text
        is_complete: False while the model is still reasoning
        char_count: Length of ``full_text``
    """
    summary: str
    full_text: str
    is_complete: bool = True
    char_count: int = 0

    def to_dict(self) -> dict:
        return {
            "summary": self.summary,
            "full_text": self.full_text,
            "is_complete": self.is_complete,
            "char_count": self.char_count,
        }


@dataclass(frozen=True)
class StreamSnapshot:
    """Read-only view of a session handed to ``on_stream``/``on_complete``/``on_error``."""
    session_id: str
    status: str
    answer_text: str = ""
    reasoning_text: str = ""
    is_streaming: bool = False
    is_done: bool = False
    is_thinking: bool = False
    thinking_trace: Optional[ThinkingTrace] = None
    document: Optional["RenderedDocument"] = None
    error_kind: Optional[str] = None
    metadata: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "status": self.status,
            "answer_text": self.answer_text,
            "reasoning_text": self.reasoning_text,
            "is_streaming": self.is_streaming,
            "is_done": self.is_done,
            "is_thinking": self.is_thinking,
            "thinking_trace": self.thinking_trace.to_dict() if self.thinking_trace else None,
            "document": self.document.to_dict() if self.document else None,
            "error_kind": self.error_kind,
        }
