"""Streaming pipeline stages.

This layer handles:
- Incremental byte decoding
- Record framing (SSE lines, bare JSON objects)
- Answer/reasoning classification
- Reasoning trace accumulation
- Incremental markdown → document conversion
- Per-session update throttling
"""

from .decoder import ByteStreamDecoder
from .framing import JsonObjectFramer, SSEFramer, SSEMessage
from .classifier import ContentClassifier, TagSplit
from .reasoning import ReasoningAccumulator
from .markdown import IncrementalMarkdownConverter, find_safe_boundary
from .throttle import UpdateThrottle, get_default_throttle

__all__ = [
    "ByteStreamDecoder",
    "SSEFramer",
    "SSEMessage",
    "JsonObjectFramer",
    "ContentClassifier",
    "TagSplit",
    "ReasoningAccumulator",
    "IncrementalMarkdownConverter",
    "find_safe_boundary",
    "UpdateThrottle",
    "get_default_throttle",
]
