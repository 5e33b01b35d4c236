"""
Answer/reasoning classification.

Two independent strategies, in precedence order:

1. Field-based: provider-declared record fields (``reasoning_content``,
   ``thinking``, ...) carry reasoning separately from the answer.
2. Tag-based: when no field-based reasoning was seen during the session, the
   fully assembled answer is scanned once at completion for paired tags such
   as ``<think>...</think>``; tag content moves from the answer to reasoning.

Tag scanning never runs per delta: tags split across chunks cannot be matched
reliably mid-stream.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from ..models.events import ClassifiedDelta, EventKind, ProviderEvent
from ..providers.errors import ClassificationError

logger = logging.getLogger(__name__)


@dataclass
class TagSplit:
    """Result of the completion-time tag scan."""
    answer_text: str
    reasoning_text: Optional[str] = None
    tag: Optional[str] = None

    @property
    def reassigned(self) -> bool:
        return self.reasoning_text is not None


class ContentClassifier:
    """Per-session classifier for provider events."""

    # Tag families in detection order
    REASONING_TAGS = ("thinking", "think", "reasoning", "thought")

    # Upper bound on the text searched for tags
    MAX_DETECTION_LENGTH = 100000

    def __init__(
        self,
        reasoning_fields: Sequence[str] = (),
        min_tag_content_length: int = 5,
        reasoning_tags: Sequence[str] = REASONING_TAGS,
    ):
        """Initialize the classifier.

        Args:
            reasoning_fields: Dotted record paths that carry reasoning text
            min_tag_content_length: Shortest tag content that counts as reasoning
            reasoning_tags: Tag names recognised by the completion scan
        """
        self.reasoning_fields = tuple(reasoning_fields)
        self.min_tag_content_length = min_tag_content_length
        self._tag_patterns = [
            (tag, re.compile(rf"<{tag}>(.*?)</{tag}>", re.IGNORECASE | re.DOTALL))
            for tag in reasoning_tags
        ]
        self.saw_field_reasoning = False

    def classify(self, event: ProviderEvent) -> ClassifiedDelta:
        """
        Split an event into answer and reasoning deltas.

        Args:
            event: A content or reasoning event

        Returns:
            ClassifiedDelta; empty for done/error events
        """
        if event.kind == EventKind.REASONING:
            if event.text:
                self.saw_field_reasoning = True
            return ClassifiedDelta(reasoning_delta=event.text or None)

        if event.kind != EventKind.CONTENT:
            return ClassifiedDelta()

        try:
            reasoning = self._extract_field_reasoning(event.raw)
        except (TypeError, AttributeError, ValueError) as e:
            error = ClassificationError(
                message=f"Could not classify record, treating it as answer text: {e}",
                provider=event.provider,
            )
            error.original_error = e
            logger.warning(error.message)
            reasoning = None
        if reasoning:
            self.saw_field_reasoning = True
        return ClassifiedDelta(
            answer_delta=event.text or None,
            reasoning_delta=reasoning or None,
        )

    def finalize(self, answer_text: str) -> TagSplit:
        """
        Run the one-off tag scan over the assembled answer.

        Skipped entirely when field-based reasoning was seen during the session.

        Args:
            answer_text: The complete accumulated answer

        Returns:
            TagSplit with the visible answer and any reassigned reasoning
        """
        if self.saw_field_reasoning or not answer_text:
            return TagSplit(answer_text=answer_text)

        searchable = answer_text[:self.MAX_DETECTION_LENGTH]
        for tag, pattern in self._tag_patterns:
            blocks: List[str] = [
                match.group(1).strip()
                for match in pattern.finditer(searchable)
            ]
            blocks = [block for block in blocks if block]
            if not blocks or max(len(block) for block in blocks) < self.min_tag_content_length:
                continue

            head = pattern.sub("", searchable)
            visible = (head + answer_text[self.MAX_DETECTION_LENGTH:]).strip()
            logger.debug(
                f"Reassigned {len(blocks)} <{tag}> block(s) "
                f"({sum(len(b) for b in blocks)} chars) from answer to reasoning"
            )
            return TagSplit(
                answer_text=visible,
                reasoning_text="\n\n".join(blocks),
                tag=tag,
            )

        return TagSplit(answer_text=answer_text)

    def reset(self) -> None:
        self.saw_field_reasoning = False

    def _extract_field_reasoning(self, record: Any) -> Optional[str]:
        if not self.reasoning_fields or not isinstance(record, (dict, list)):
            return None
        for path in self.reasoning_fields:
            value = get_nested_value(record, path)
            if isinstance(value, str) and value:
                return value
        return None


def get_nested_value(record: Any, path: str) -> Any:
    """
    Resolve a dotted path such as ``choices.0.delta.reasoning_content``.

    Numeric segments index into lists. Missing segments yield None.
    """
    current = record
    for key in path.split("."):
        if isinstance(current, dict):
            current = current.get(key)
        elif isinstance(current, list) and key.isdigit():
            index = int(key)
            current = current[index] if index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current
