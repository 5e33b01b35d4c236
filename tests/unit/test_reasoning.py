"""Unit tests for the reasoning accumulator."""

import pytest

from inkstream.streaming.reasoning import ReasoningAccumulator


class TestReasoningAccumulator:
    """Test ReasoningAccumulator."""

    def test_single_growing_trace(self):
        acc = ReasoningAccumulator()
        for delta in ["First, ", "consider ", "the input."]:
            acc.append(delta)

        trace = acc.finalize()
        assert trace.full_text == "First, consider the input."
        assert trace.is_complete is True
        assert trace.char_count == len(trace.full_text)
        assert trace.summary.startswith("Reasoning (26 chars): First, consider")

    def test_text_grows_between_reads(self):
        acc = ReasoningAccumulator()
        seen = []
        for delta in ["a", "b", "c"]:
            acc.append(delta)
            seen.append(acc.text)

        assert seen == ["a", "ab", "abc"]
        assert acc.placeholder().char_count == 3

    def test_has_started_and_placeholder(self):
        acc = ReasoningAccumulator()
        assert acc.has_started is False
        acc.append("")
        assert acc.has_started is False

        acc.append("thinking")
        placeholder = acc.placeholder()
        assert acc.has_started is True
        assert placeholder.is_complete is False
        assert placeholder.full_text == "thinking"

    def test_finalize_trims_and_is_idempotent(self):
        acc = ReasoningAccumulator()
        acc.append("\n  step one  \n")

        first = acc.finalize()
        assert first.full_text == "step one"
        assert acc.finalize() is first

    def test_long_summary_is_truncated(self):
        acc = ReasoningAccumulator()
        acc.append("word " * 100)

        summary = acc.finalize().summary
        assert summary.endswith("…")
        assert len(summary) < 120

    def test_finalize_without_reasoning(self):
        acc = ReasoningAccumulator()
        assert acc.finalize() is None
        acc.append("   ")
        assert acc.finalize() is None

    def test_append_after_finalize_raises(self):
        acc = ReasoningAccumulator()
        acc.append("done thinking")
        acc.finalize()
        with pytest.raises(RuntimeError):
            acc.append("more")

    def test_reset(self):
        acc = ReasoningAccumulator()
        acc.append("old")
        acc.finalize()
        acc.reset()
        acc.append("new")
        assert acc.finalize().full_text == "new"
