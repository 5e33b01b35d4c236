"""Structured document tree produced from streamed markdown.

Nodes follow the ProseMirror/TipTap JSON shape so that the editor layer can
load them directly (``doc`` → block nodes → inline ``text`` nodes with marks).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class DocumentNode:
    """A block or inline node of a rendered document."""
    type: str
    attrs: Optional[Dict[str, Any]] = None
    content: Optional[List["DocumentNode"]] = None
    text: Optional[str] = None
    marks: Optional[List[Dict[str, Any]]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type}
        if self.attrs:
            data["attrs"] = dict(self.attrs)
        if self.content is not None:
            data["content"] = [child.to_dict() for child in self.content]
        if self.text is not None:
            data["text"] = self.text
        if self.marks:
            data["marks"] = [dict(mark) for mark in self.marks]
        return data

    def plain_text(self) -> str:
        """Concatenated text of this node and its descendants."""
        if self.text is not None:
            return self.text
        if self.type == "hard_break":
            return "\n"
        return "".join(child.plain_text() for child in self.content or [])


@dataclass
class RenderedDocument:
    """Root ``doc`` node returned by the incremental converter.

    Attributes:
        content: Top-level blocks, cached safe-prefix blocks first
        stable_count: How many leading blocks come from the cached safe prefix
        source_length: Length of the markdown this document was built from
    """
    content: List[DocumentNode] = field(default_factory=list)
    stable_count: int = 0
    source_length: int = 0

    @property
    def type(self) -> str:
        return "doc"

    @property
    def stable_blocks(self) -> List[DocumentNode]:
        return self.content[:self.stable_count]

    @property
    def tentative_blocks(self) -> List[DocumentNode]:
        return self.content[self.stable_count:]

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "doc", "content": [block.to_dict() for block in self.content]}

    def plain_text(self) -> str:
        return "\n\n".join(block.plain_text() for block in self.content)


def text_paragraph(text: str) -> DocumentNode:
    """Build a paragraph holding ``text`` verbatim (no markdown interpretation)."""
    if not text:
        return DocumentNode(type="paragraph", content=[])
    return DocumentNode(type="paragraph", content=[DocumentNode(type="text", text=text)])
