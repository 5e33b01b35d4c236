"""Unit tests for incremental markdown conversion."""

import pytest

from inkstream.streaming.markdown import (
    IncrementalMarkdownConverter,
    create_parser,
    find_safe_boundary,
    fold_tokens,
)

SAMPLE = """# Streaming title

Intro paragraph with **bold** text
that wraps lines. See [docs][ref] here.

- first item
- second item

  continued item paragraph

After the list.

```python
def f():

    return 1
```
Closing paragraph with `code`.

> quoted
> text

1. one
2. two

<!-- note

```py
> not a quote
```
-->

<div>
```py
> quote
```
</div>

Tail paragraph.

[ref]: https://example.com
"""


def full_parse(markdown):
    return [block.to_dict() for block in fold_tokens(create_parser().parse(markdown))]


def convert_dict(markdown, final=True):
    return IncrementalMarkdownConverter().convert(markdown, final=final).to_dict()["content"]


class TestSafeBoundary:
    """Test find_safe_boundary."""

    def test_no_boundary_without_blank_line(self):
        assert find_safe_boundary("one\ntwo\nthree\n") == 0

    def test_paragraph_after_blank_line(self):
        text = "one\n\ntwo\n"
        assert find_safe_boundary(text) == text.index("two")

    def test_unterminated_candidate_line_does_not_count(self):
        assert find_safe_boundary("one\n\ntw") == 0

    def test_list_continuation_is_not_a_boundary(self):
        assert find_safe_boundary("- a\n\n- b\n") == 0
        assert find_safe_boundary("1. a\n\n2. b\n") == 0

    def test_paragraph_after_list(self):
        assert find_safe_boundary("- a\n\nafter\n") == 5

    def test_indented_line_is_not_a_boundary(self):
        assert find_safe_boundary("text\n\n    indented code\n") == 0

    def test_blank_lines_inside_fence_are_ignored(self):
        text = "```\ncode\n\nmore\n"
        assert find_safe_boundary(text) == 0

    def test_after_closing_fence(self):
        text = "```\ncode\n\nmore\n```\nafter"
        assert find_safe_boundary(text) == text.index("after")

    def test_tilde_fence_needs_matching_marker(self):
        text = "~~~\ncode\n```\n\nstill code\n"
        assert find_safe_boundary(text) == 0

    def test_html_comment_spans_blank_lines(self):
        assert find_safe_boundary("<!-- c\n\ncode\n") == 0
        text = "<!-- c\n\ncode\n-->\n\nafter\n"
        assert find_safe_boundary(text) == text.index("after")

    def test_fence_inside_html_block_is_ignored(self):
        text = "<div>\n```py\n> quote\n```\n</div>\n\nafter\n"
        assert find_safe_boundary(text) == text.index("after")

    def test_lone_tag_does_not_interrupt_paragraph(self):
        # <span> continues the paragraph, so the fence below it is real
        assert find_safe_boundary("para\n<span>\n```\n\nfoo\n") == 0

    def test_html_ignored_when_parser_disables_it(self):
        text = "<!-- c\n\ncode\n"
        assert find_safe_boundary(text, html=False) == text.index("code")


class TestDocumentShape:
    """Test the produced node tree."""

    def test_heading_and_inline_marks(self):
        content = convert_dict("# Title\n\nSome **bold** and *em* with `code` and [link](https://x.io).\n")

        assert content[0] == {"type": "heading", "attrs": {"level": 1},
                              "content": [{"type": "text", "text": "Title"}]}
        paragraph = content[1]["content"]
        assert {"type": "text", "text": "bold", "marks": [{"type": "strong"}]} in paragraph
        assert {"type": "text", "text": "em", "marks": [{"type": "em"}]} in paragraph
        assert {"type": "text", "text": "code", "marks": [{"type": "code"}]} in paragraph
        link = next(node for node in paragraph if node["text"] == "link")
        assert link["marks"][0]["type"] == "link"
        assert link["marks"][0]["attrs"]["href"] == "https://x.io"

    def test_code_block(self):
        content = convert_dict("```python\nprint(1)\n```\n")
        assert content == [{
            "type": "code_block",
            "attrs": {"params": "python"},
            "content": [{"type": "text", "text": "print(1)"}],
        }]

    def test_lists(self):
        content = convert_dict("3. three\n4. four\n\n- a\n- b\n")

        ordered, bullets = content
        assert ordered["type"] == "ordered_list"
        assert ordered["attrs"] == {"order": 3}
        assert [item["type"] for item in ordered["content"]] == ["list_item", "list_item"]
        assert ordered["content"][0]["content"][0]["type"] == "paragraph"
        assert bullets["type"] == "bullet_list"
        assert len(bullets["content"]) == 2

    def test_blockquote_rule_and_breaks(self):
        content = convert_dict("> quote\n\n---\n\nline one  \nline two\nline three\n")

        assert content[0]["type"] == "blockquote"
        assert content[0]["content"][0]["type"] == "paragraph"
        assert content[1] == {"type": "horizontal_rule"}
        inline = content[2]["content"]
        assert {"type": "hard_break"} in inline
        assert inline[-1]["text"] == "line three"

    def test_table_and_strikethrough(self):
        content = convert_dict("| a | b |\n|---|---|\n| 1 | ~~2~~ |\n")

        table = content[0]
        assert table["type"] == "table"
        header_row, body_row = table["content"]
        assert [cell["type"] for cell in header_row["content"]] == ["table_header", "table_header"]
        struck = body_row["content"][1]["content"][0]["content"][0]
        assert struck == {"type": "text", "text": "2", "marks": [{"type": "strike"}]}

    def test_image(self):
        content = convert_dict("![alt text](img.png)\n")
        image = content[0]["content"][0]
        assert image["type"] == "image"
        assert image["attrs"]["src"] == "img.png"
        assert image["attrs"]["alt"] == "alt text"


class TestIncrementalConversion:
    """Test caching and stability of the incremental converter."""

    def test_identical_input_returns_same_document(self):
        converter = IncrementalMarkdownConverter()
        first = converter.convert("Para one.\n\nPara two")
        assert converter.convert("Para one.\n\nPara two") is first

    def test_stable_prefix_blocks_are_reused(self):
        converter = IncrementalMarkdownConverter()
        text = "Para one.\n\nPara two\n\nPara three"

        doc = converter.convert(text)
        parses = converter.prefix_parses
        later = converter.convert(text + " continues")

        assert doc.stable_count == 1
        assert len(doc.content) == 3
        assert later.content[0] is doc.content[0]
        assert converter.prefix_parses == parses

    def test_boundary_moving_forward_keeps_earlier_blocks(self):
        converter = IncrementalMarkdownConverter()
        doc = converter.convert("Para one.\n\nPara two\n\nPara three")
        later = converter.convert("Para one.\n\nPara two\n\nPara three\n\nPara four")

        assert later.stable_count == 2
        assert later.content[0] is doc.content[0]
        assert later.stable_blocks == later.content[:2]
        assert len(later.tentative_blocks) == 2
        assert [block.plain_text() for block in later.content] == [
            "Para one.", "Para two", "Para three", "Para four",
        ]

    def test_final_marks_everything_stable(self):
        converter = IncrementalMarkdownConverter()
        doc = converter.convert("One\n\nTwo", final=True)
        assert doc.stable_count == len(doc.content) == 2

    @pytest.mark.parametrize("step", [1, 5, 17])
    def test_incremental_matches_full_parse(self, step):
        """Every intermediate render equals a from-scratch parse of the same text."""
        converter = IncrementalMarkdownConverter()
        for end in range(step, len(SAMPLE) + step, step):
            text = SAMPLE[:end]
            assert converter.convert(text).to_dict()["content"] == full_parse(text)
        assert converter.convert(SAMPLE, final=True).to_dict()["content"] == full_parse(SAMPLE)

    def test_tail_parse_failure_degrades_to_text(self, monkeypatch):
        converter = IncrementalMarkdownConverter()

        def broken(markdown):
            raise ValueError("parser exploded")

        monkeypatch.setattr(converter, "_parse", broken)
        doc = converter.convert("**unfinished")

        assert doc.to_dict()["content"] == [
            {"type": "paragraph", "content": [{"type": "text", "text": "**unfinished"}]}
        ]

    def test_reset(self):
        converter = IncrementalMarkdownConverter()
        first = converter.convert("a\n\nb\n")
        converter.reset()
        assert converter.convert("a\n\nb\n") is not first

    def test_reference_definition_after_use_resolves(self):
        text = "See [docs][ref] here.\n\nMore text.\n\n[ref]: http://example.com\n"
        converter = IncrementalMarkdownConverter()
        for end in range(1, len(text) + 1):
            converter.convert(text[:end])
        doc = converter.convert(text, final=True).to_dict()["content"]

        assert doc == full_parse(text)
        link = next(node for node in doc[0]["content"] if node["text"] == "docs")
        assert link["marks"] == [{"type": "link", "attrs": {"href": "http://example.com", "title": None}}]

    def test_reference_definition_disables_prefix_cache(self):
        converter = IncrementalMarkdownConverter()
        doc = converter.convert("[ref]: http://example.com\n\nSee [ref].\n\nMore")
        assert doc.stable_count == 0
        assert doc.content[0].plain_text() == "See ref."
