"""
Incremental markdown → document conversion.

Streaming text is re-rendered many times per second. Re-parsing everything on
every update is quadratic, so the accumulated markdown is split at the last
*safe boundary*: a position that no later text can pull back into an earlier
block. The prefix before it is parsed once and cached; only the tail is parsed
on every call.

Safe boundary rule:

- the start of a non-indented line that follows one or more blank lines,
  outside any fenced code block or raw HTML block, and that does not continue
  a list preceding the blank line(s);
- the start of the line after a closing top-level code fence.

The candidate line itself must be complete (newline-terminated) so that its
first characters cannot still turn into a list marker or fence.

Link reference definitions resolve across the whole document, so once one
appears the text is parsed in one piece on every call.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Pattern, Tuple

from markdown_it import MarkdownIt
from markdown_it.rules_block.html_block import HTML_SEQUENCES

from ..models.document import DocumentNode, RenderedDocument, text_paragraph

logger = logging.getLogger(__name__)

LIST_MARKER = re.compile(r"^ {0,3}(?:[*+-]|\d{1,9}[.)])(?:[ \t]|$)")
FENCE_OPEN = re.compile(r"^( {0,3})(`{3,}|~{3,})")
QUOTE_PREFIX = re.compile(r"^(?: {0,3}> ?)+")
HEADING_OR_RULE = re.compile(
    r"^ {0,3}(?:#{1,6}(?:[ \t]|$)|(?:\*[ \t]*){3,}$|(?:-[ \t]*){3,}$|(?:_[ \t]*){3,}$)"
)
SETEXT_EQUALS = re.compile(r"^ {0,3}=+[ \t]*$")
REFERENCE_DEFINITION = re.compile(r"^ {0,3}\[[^\]]+\]:", re.MULTILINE)

# Block token types mapped straight onto document node types
BLOCK_TYPES = {
    "paragraph": "paragraph",
    "blockquote": "blockquote",
    "bullet_list": "bullet_list",
    "ordered_list": "ordered_list",
    "list_item": "list_item",
    "table": "table",
    "tr": "table_row",
    "th": "table_header",
    "td": "table_cell",
}

# Containers whose open/close tokens produce no node
TRANSPARENT_TYPES = {"thead", "tbody"}

MARK_TYPES = {
    "strong": "strong",
    "em": "em",
    "s": "strike",
}


def create_parser() -> MarkdownIt:
    """CommonMark parser with GFM tables and strikethrough."""
    return MarkdownIt("commonmark").enable(["table", "strikethrough"])


def find_safe_boundary(text: str, html: bool = True) -> int:
    """
    Return the index where the safe prefix of ``text`` ends (0 if none).

    Args:
        text: Accumulated markdown
        html: Whether the parser recognises raw HTML blocks

    Returns:
        Character offset of the last safe boundary
    """
    boundary = 0
    pos = 0
    in_fence = False
    fence_marker = ""
    fence_top_level = False
    html_end: Optional[Pattern[str]] = None
    saw_blank = False
    in_list = False
    paragraph_open = False

    while True:
        newline = text.find("\n", pos)
        if newline < 0:
            break  # the unterminated last line never qualifies
        line = text[pos:newline].rstrip("\r")
        line_start = pos
        pos = newline + 1

        if in_fence:
            stripped = line.strip()
            if (stripped.startswith(fence_marker)
                    and stripped == fence_marker[0] * len(stripped)):
                in_fence = False
                if fence_top_level:
                    boundary = pos
                    in_list = False
                saw_blank = False
                paragraph_open = False
            continue

        if html_end is not None:
            # Blank lines only close the blocks that end on one
            if html_end.search(line.lstrip(" \t")):
                html_end = None
                saw_blank = not line.strip()
                paragraph_open = False
            continue

        if not line.strip():
            saw_blank = True
            paragraph_open = False
            continue

        indented = line[0] in " \t"
        is_list_item = bool(LIST_MARKER.match(line))

        if saw_blank and not indented and not (in_list and is_list_item):
            boundary = line_start
            in_list = False
        saw_blank = False

        if html and (not in_list or not indented):
            closer = match_html_block(line, paragraph_open)
            if closer is not None:
                in_list = False
                paragraph_open = False
                if not closer.search(line.lstrip(" \t")):
                    html_end = closer
                continue

        fence = FENCE_OPEN.match(line)
        if fence:
            in_fence = True
            fence_marker = fence.group(2)
            fence_top_level = not fence.group(1) and not in_list
            continue

        if is_list_item:
            in_list = True
        elif not indented and boundary == line_start:
            in_list = False

        content = QUOTE_PREFIX.sub("", line)
        if HEADING_OR_RULE.match(content) or (paragraph_open and SETEXT_EQUALS.match(content)):
            paragraph_open = False
        elif _indent_width(line) >= 4 and not paragraph_open and not in_list:
            pass  # indented code
        else:
            paragraph_open = True

    return boundary


def match_html_block(line: str, paragraph_open: bool = False) -> Optional[Pattern[str]]:
    """
    Return the end pattern of the raw HTML block ``line`` opens, or None.

    Blocks that cannot interrupt a paragraph (a lone open or close tag) only
    start when no paragraph is open.
    """
    if _indent_width(line) > 3:
        return None
    body = line.lstrip(" \t")
    if not body.startswith("<"):
        return None
    for opener, closer, interrupts_paragraph in HTML_SEQUENCES:
        if opener.search(body):
            if paragraph_open and not interrupts_paragraph:
                return None
            return closer
    return None


def has_reference_definitions(text: str) -> bool:
    """True when ``text`` defines a link reference that may resolve anywhere."""
    return REFERENCE_DEFINITION.search(text) is not None


def _indent_width(line: str) -> int:
    expanded = line.expandtabs(4)
    return len(expanded) - len(expanded.lstrip(" "))


class IncrementalMarkdownConverter:
    """Per-session markdown converter with a cached safe prefix."""

    def __init__(self, parser: Optional[MarkdownIt] = None):
        self._md = parser or create_parser()
        self._prefix_key: Optional[Tuple[int, int]] = None
        self._prefix_blocks: List[DocumentNode] = []
        self._prefix_text = ""
        self._last_input: Optional[Tuple[str, bool]] = None
        self._last_document: Optional[RenderedDocument] = None
        self.prefix_parses = 0
        self.tail_parses = 0

    def convert(self, markdown: str, final: bool = False) -> RenderedDocument:
        """
        Convert the full accumulated markdown into a document.

        Args:
            markdown: Entire answer text so far (not a delta)
            final: Treat the whole text as safe (end of stream)

        Returns:
            RenderedDocument whose leading ``stable_count`` blocks are shared
            with previous results while the safe prefix is unchanged
        """
        if self._last_document is not None and self._last_input == (markdown, final):
            return self._last_document

        if has_reference_definitions(markdown):
            boundary = 0
        else:
            boundary = find_safe_boundary(markdown, html=self._md.options.get("html", True))
        prefix = markdown[:boundary]
        tail = markdown[boundary:]

        key = (len(prefix), hash(prefix))
        if key != self._prefix_key:
            if self._prefix_text and prefix.startswith(self._prefix_text):
                # Boundary moved forward: only the newly settled segment is parsed
                segment = prefix[len(self._prefix_text):]
                self._prefix_blocks = self._prefix_blocks + self._parse(segment)
            else:
                self._prefix_blocks = self._parse(prefix) if prefix else []
            self._prefix_key = key
            self._prefix_text = prefix
            self.prefix_parses += 1

        prefix_blocks = self._prefix_blocks
        tail_blocks = self._parse_tail(tail) if tail.strip() else []

        if final:
            # Everything is settled; the full text becomes the cached prefix
            stable = prefix_blocks + tail_blocks
            self._prefix_blocks = stable
            self._prefix_key = (len(markdown), hash(markdown))
            self._prefix_text = markdown
            document = RenderedDocument(
                content=list(stable),
                stable_count=len(stable),
                source_length=len(markdown),
            )
        else:
            document = RenderedDocument(
                content=prefix_blocks + tail_blocks,
                stable_count=len(prefix_blocks),
                source_length=len(markdown),
            )

        self._last_input = (markdown, final)
        self._last_document = document
        return document

    def reset(self) -> None:
        self._prefix_key = None
        self._prefix_blocks = []
        self._prefix_text = ""
        self._last_input = None
        self._last_document = None
        self.prefix_parses = 0
        self.tail_parses = 0

    def _parse_tail(self, tail: str) -> List[DocumentNode]:
        self.tail_parses += 1
        try:
            return self._parse(tail)
        except Exception as e:
            logger.warning(f"Markdown tail parse failed, rendering as plain text: {e}")
            return [text_paragraph(tail)]

    def _parse(self, markdown: str) -> List[DocumentNode]:
        return fold_tokens(self._md.parse(markdown))


def fold_tokens(tokens: List[Any]) -> List[DocumentNode]:
    """Fold a markdown-it block token stream into document nodes."""
    root: List[DocumentNode] = []
    stack: List[DocumentNode] = []

    def append(node: DocumentNode) -> None:
        if stack:
            stack[-1].content.append(node)
        else:
            root.append(node)

    for token in tokens:
        base_type = token.type.rsplit("_", 1)[0] if token.nesting else token.type

        if base_type in TRANSPARENT_TYPES:
            continue

        if token.nesting == 1:
            stack.append(_open_block(token, base_type))
        elif token.nesting == -1:
            if stack:
                append(stack.pop())
        elif token.type == "inline":
            inline = fold_inline(token.children or [])
            if stack and stack[-1].type in ("table_header", "table_cell"):
                append(DocumentNode(type="paragraph", content=inline))
            elif stack:
                stack[-1].content.extend(inline)
            else:
                append(DocumentNode(type="paragraph", content=inline))
        elif token.type in ("fence", "code_block"):
            code = token.content[:-1] if token.content.endswith("\n") else token.content
            node = DocumentNode(
                type="code_block",
                attrs={"params": (token.info or "").strip()},
                content=[DocumentNode(type="text", text=code)] if code else [],
            )
            append(node)
        elif token.type == "hr":
            append(DocumentNode(type="horizontal_rule"))
        elif token.type == "html_block":
            append(text_paragraph(token.content.rstrip("\n")))

    # Unbalanced stream: close whatever is still open
    while stack:
        append(stack.pop())
    return root


def _open_block(token: Any, base_type: str) -> DocumentNode:
    if base_type == "heading":
        return DocumentNode(type="heading", attrs={"level": int(token.tag[1:])}, content=[])
    if base_type == "ordered_list":
        start = token.attrGet("start")
        return DocumentNode(type="ordered_list", attrs={"order": int(start) if start else 1}, content=[])
    return DocumentNode(type=BLOCK_TYPES.get(base_type, base_type), content=[])


def fold_inline(children: List[Any]) -> List[DocumentNode]:
    """Fold inline tokens into text nodes carrying marks."""
    nodes: List[DocumentNode] = []
    marks: List[Dict[str, Any]] = []

    def add_text(text: str, extra: Optional[Dict[str, Any]] = None) -> None:
        if not text:
            return
        node_marks = [dict(mark) for mark in marks]
        if extra:
            node_marks.append(extra)
        nodes.append(DocumentNode(type="text", text=text, marks=node_marks or None))

    for token in children:
        kind = token.type
        if kind in ("text", "html_inline"):
            add_text(token.content)
        elif kind == "softbreak":
            add_text(" ")
        elif kind == "hardbreak":
            nodes.append(DocumentNode(type="hard_break"))
        elif kind == "code_inline":
            add_text(token.content, {"type": "code"})
        elif kind == "image":
            nodes.append(DocumentNode(type="image", attrs={
                "src": token.attrGet("src"),
                "alt": token.content or None,
                "title": token.attrGet("title"),
            }))
        elif kind == "link_open":
            marks.append({"type": "link", "attrs": {
                "href": token.attrGet("href"),
                "title": token.attrGet("title"),
            }})
        elif kind.endswith("_open") and kind[:-5] in MARK_TYPES:
            marks.append({"type": MARK_TYPES[kind[:-5]]})
        elif kind.endswith("_close"):
            mark_type = "link" if kind == "link_close" else MARK_TYPES.get(kind[:-6])
            for i in range(len(marks) - 1, -1, -1):
                if marks[i]["type"] == mark_type:
                    del marks[i]
                    break
    return nodes
