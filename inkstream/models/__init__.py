from .document import DocumentNode, RenderedDocument
from .events import (
    ClassifiedDelta,
    EventKind,
    ProviderEvent,
    StreamSnapshot,
    ThinkingTrace,
)
from .generation import (
    CustomProviderConfig,
    GenerationOptions,
    GenerationRequest,
)

__all__ = [
    "DocumentNode",
    "RenderedDocument",
    "ClassifiedDelta",
    "EventKind",
    "ProviderEvent",
    "StreamSnapshot",
    "ThinkingTrace",
    "CustomProviderConfig",
    "GenerationOptions",
    "GenerationRequest",
]
