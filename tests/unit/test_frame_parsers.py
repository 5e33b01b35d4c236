"""Unit tests for record framing and provider frame parsers."""

import json
import logging

from inkstream.models.events import EventKind
from inkstream.providers.alibaba.parsers import DashScopeParser
from inkstream.providers.anthropic.parsers import MessagesStreamParser
from inkstream.providers.ollama.parsers import OllamaChatParser
from inkstream.providers.openai.parsers import ChatCompletionsParser
from inkstream.streaming.framing import JsonObjectFramer, SSEFramer
from tests.helpers.streaming_mocks import anthropic_stream, openai_chunk


def kinds(events):
    return [event.kind for event in events]


def feed_all(parser, pieces):
    events = []
    for piece in pieces:
        events.extend(parser.parse(piece))
    events.extend(parser.flush())
    return events


class TestSSEFramer:
    """Test SSEFramer."""

    def test_dispatch_on_blank_line(self):
        framer = SSEFramer()
        assert framer.feed("data: one\n") == []
        messages = framer.feed("\n")
        assert [m.data for m in messages] == ["one"]

    def test_event_and_id_fields(self):
        framer = SSEFramer()
        messages = framer.feed("event: message_stop\nid: 7\ndata: {}\n\n")
        assert messages[0].event == "message_stop"
        assert messages[0].id == "7"

    def test_data_without_space_and_crlf(self):
        framer = SSEFramer()
        messages = framer.feed('data:{"a":1}\r\n\r\n')
        assert messages[0].data == '{"a":1}'

    def test_comments_are_ignored(self):
        framer = SSEFramer()
        assert framer.feed(": keep-alive\n\n") == []

    def test_multi_line_data(self):
        framer = SSEFramer()
        messages = framer.feed("data: first\ndata: second\n\n")
        assert messages[0].data == "first\nsecond"

    def test_bare_json_line_is_a_record(self):
        framer = SSEFramer()
        messages = framer.feed('{"x": 1}\n')
        assert len(messages) == 1
        assert messages[0].bare is True

    def test_bare_json_line_ends_pending_event(self):
        framer = SSEFramer()
        messages = framer.feed('data: {"a": 1}\n{"b": 2}\n\n')
        assert [m.data for m in messages] == ['{"a": 1}', '{"b": 2}']
        assert [m.bare for m in messages] == [False, True]

    def test_flush_dispatches_unterminated_event(self):
        framer = SSEFramer()
        assert framer.feed("data: tail") == []
        assert [m.data for m in framer.flush()] == ["tail"]
        assert framer.buffered == ""


class TestJsonObjectFramer:
    """Test JsonObjectFramer."""

    def test_objects_spanning_fragments(self):
        framer = JsonObjectFramer()
        assert framer.feed('{"a": "x{') == []
        assert framer.feed('y}"}{"b"') == ['{"a": "x{y}"}']
        assert framer.feed(": 2}\n") == ['{"b": 2}']

    def test_escaped_quotes_inside_strings(self):
        framer = JsonObjectFramer()
        records = framer.feed('{"a": "say \\"}\\" now"}')
        assert len(records) == 1
        assert json.loads(records[0]) == {"a": 'say "}" now'}

    def test_flush_returns_remainder(self):
        framer = JsonObjectFramer()
        framer.feed('{"a": 1')
        assert framer.flush() == ['{"a": 1']
        assert framer.flush() == []


class TestChatCompletionsParser:
    """Test the OpenAI-compatible parser."""

    def test_record_split_across_fragments(self):
        """Two fragments of one bare JSON line produce exactly one answer delta."""
        parser = ChatCompletionsParser("openai")
        events = feed_all(parser, ['{"choices":[{"delta":{"content":"He', 'llo"}}]}\n'])

        assert kinds(events) == [EventKind.CONTENT]
        assert events[0].text == "Hello"
        assert parser.records_skipped == 0

    def test_done_sentinel_and_finish_reason(self):
        parser = ChatCompletionsParser("openai")
        events = feed_all(parser, [openai_chunk("Hi"), openai_chunk(finish_reason="stop"), "data: [DONE]\n\n"])
        assert kinds(events) == [EventKind.CONTENT, EventKind.DONE, EventKind.DONE]

    def test_malformed_record_is_skipped(self, caplog):
        """A broken record is logged and the following record still parses."""
        parser = ChatCompletionsParser("openai")
        with caplog.at_level(logging.WARNING):
            events = parser.parse("data: {not json}\n\n" + openai_chunk("after"))

        assert [e.text for e in events] == ["after"]
        assert parser.records_skipped == 1
        assert "Skipping malformed record" in caplog.text

    def test_reasoning_only_record_keeps_raw(self):
        parser = ChatCompletionsParser("deepseek")
        events = parser.parse(openai_chunk(reasoning_content="hmm"))

        assert kinds(events) == [EventKind.CONTENT]
        assert events[0].text is None
        assert events[0].raw["choices"][0]["delta"]["reasoning_content"] == "hmm"

    def test_role_only_delta_produces_nothing(self):
        parser = ChatCompletionsParser("openai")
        record = {"choices": [{"delta": {"role": "assistant"}, "finish_reason": None}]}
        assert parser.parse(f"data: {json.dumps(record)}\n\n") == []

    def test_error_payload(self):
        parser = ChatCompletionsParser("openai")
        events = parser.parse('data: {"error": {"message": "model overloaded"}}\n\n')
        assert kinds(events) == [EventKind.ERROR]
        assert events[0].text == "model overloaded"

    def test_one_json_value_per_data_line(self):
        parser = ChatCompletionsParser("zhipu")
        first = json.dumps({"choices": [{"delta": {"content": "a"}}]})
        second = json.dumps({"choices": [{"delta": {"content": "b"}}]})
        events = parser.parse(f"data: {first}\ndata: {second}\n\n")
        assert [e.text for e in events] == ["a", "b"]

    def test_bare_line_after_unterminated_data_event(self):
        """A bare record right after a data line keeps both records."""
        parser = ChatCompletionsParser("openai")
        events = feed_all(parser, [
            'data: {"choices":[{"delta":{"content":"A"}}]}\n'
            '{"choices":[{"delta":{"content":"B"}}]}\n\n'
        ])
        assert [e.text for e in events] == ["A", "B"]
        assert parser.records_skipped == 0


class TestMessagesStreamParser:
    """Test the Anthropic parser."""

    def test_text_and_thinking_deltas(self):
        parser = MessagesStreamParser("anthropic")
        events = feed_all(parser, anthropic_stream(["Hel", "lo"], thinking_parts=["let me think"]))

        assert kinds(events) == [EventKind.REASONING, EventKind.CONTENT, EventKind.CONTENT, EventKind.DONE]
        assert events[0].text == "let me think"
        assert "".join(e.text for e in events[1:3]) == "Hello"

    def test_error_event(self):
        parser = MessagesStreamParser("anthropic")
        payload = {"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}}
        events = parser.parse(f"event: error\ndata: {json.dumps(payload)}\n\n")
        assert kinds(events) == [EventKind.ERROR]
        assert events[0].text == "Overloaded"


class TestDashScopeParser:
    """Test the Alibaba parser."""

    def test_cumulative_text_becomes_deltas(self):
        parser = DashScopeParser("alibaba")
        records = [
            {"output": {"text": "Hel", "finish_reason": "null"}},
            {"output": {"text": "Hello", "finish_reason": "null"}},
            {"output": {"text": "Hello world", "finish_reason": "stop"}},
        ]
        events = feed_all(parser, [f"data:{json.dumps(r)}\n\n" for r in records])

        assert [e.text for e in events if e.kind == EventKind.CONTENT] == ["Hel", "lo", " world"]
        assert events[-1].kind == EventKind.DONE

    def test_incremental_pieces_are_kept_whole(self):
        parser = DashScopeParser("alibaba", incremental=True)
        records = [
            {"output": {"text": "a", "finish_reason": "null"}},
            {"output": {"text": "ab", "finish_reason": "stop"}},
        ]
        events = feed_all(parser, [f"data:{json.dumps(r)}\n\n" for r in records])

        assert [e.text for e in events if e.kind == EventKind.CONTENT] == ["a", "ab"]

    def test_rewritten_cumulative_record_is_skipped(self, caplog):
        parser = DashScopeParser("alibaba")
        records = [
            {"output": {"text": "Hello", "finish_reason": "null"}},
            {"output": {"text": "Help", "finish_reason": "null"}},
            {"output": {"text": "Help me", "finish_reason": "stop"}},
        ]
        with caplog.at_level(logging.WARNING):
            events = feed_all(parser, [f"data:{json.dumps(r)}\n\n" for r in records])

        assert [e.text for e in events if e.kind == EventKind.CONTENT] == ["Hello", " me"]
        assert "rewrote earlier text" in caplog.text

    def test_error_record(self):
        parser = DashScopeParser("alibaba")
        events = parser.parse('data:{"code": "InvalidApiKey", "message": "Invalid API-key provided."}\n\n')
        assert kinds(events) == [EventKind.ERROR]
        assert "InvalidApiKey" in events[0].text


class TestOllamaChatParser:
    """Test the Ollama parser."""

    def test_bare_objects_without_separators(self):
        parser = OllamaChatParser("ollama")
        stream = (
            '{"message": {"role": "assistant", "content": "Hi"}, "done": false}'
            '{"message": {"role": "assistant", "content": " there"}, "done": false}\n'
            '{"message": {"role": "assistant", "content": ""}, "done": true}'
        )
        events = feed_all(parser, [stream[:30], stream[30:77], stream[77:]])

        assert [e.text for e in events if e.kind == EventKind.CONTENT] == ["Hi", " there"]
        assert events[-1].kind == EventKind.DONE

    def test_error_object(self):
        parser = OllamaChatParser("ollama")
        events = parser.parse('{"error": "model \\"llama9\\" not found"}\n')
        assert kinds(events) == [EventKind.ERROR]
        assert "not found" in events[0].text
