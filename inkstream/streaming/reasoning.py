"""Reasoning trace accumulation."""

from typing import Optional

from ..models.events import ThinkingTrace


class ReasoningAccumulator:
    """
    Collects reasoning deltas into one growing string.

    The trace is always a single whole; it is never split into steps or
    rewritten mid-stream.
    """

    SUMMARY_PREVIEW_CHARS = 80

    def __init__(self):
        self._text = ""
        self._final: Optional[ThinkingTrace] = None

    def append(self, delta: Optional[str]) -> None:
        """Append a reasoning delta. Empty deltas are ignored."""
        if not delta:
            return
        if self._final is not None:
            raise RuntimeError("Cannot append reasoning after the trace was finalized")
        self._text += delta

    @property
    def has_started(self) -> bool:
        return bool(self._text)

    @property
    def text(self) -> str:
        return self._text

    def placeholder(self) -> ThinkingTrace:
        """In-progress trace shown while the model is still reasoning."""
        return ThinkingTrace(
            summary="Thinking...",
            full_text=self._text,
            is_complete=False,
            char_count=len(self._text),
        )

    def finalize(self) -> Optional[ThinkingTrace]:
        """
        Produce the finished trace.

        Idempotent: repeated calls return the same trace.

        Returns:
            ThinkingTrace, or None when no reasoning was received
        """
        if self._final is not None:
            return self._final
        full_text = self.text.strip()
        if not full_text:
            return None
        self._final = ThinkingTrace(
            summary=self._summarize(full_text),
            full_text=full_text,
            is_complete=True,
            char_count=len(full_text),
        )
        return self._final

    def reset(self) -> None:
        self._text = ""
        self._final = None

    def _summarize(self, text: str) -> str:
        preview = " ".join(text.split())
        if len(preview) > self.SUMMARY_PREVIEW_CHARS:
            preview = preview[:self.SUMMARY_PREVIEW_CHARS].rstrip() + "…"
        return f"Reasoning ({len(text)} chars): {preview}"
