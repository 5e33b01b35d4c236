"""
Record framing for decoded provider text.

Two framings cover the supported providers:

- ``SSEFramer``: server-sent events, ``field: value`` lines, events dispatched
  on a blank line. A bare JSON line (``{...}`` with no field prefix) is treated
  as a complete record of its own.
- ``JsonObjectFramer``: a stream of bare JSON objects/arrays, with or without
  separators, whose boundaries are found by bracket matching.

Both keep the unterminated remainder buffered between calls.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class SSEMessage:
    """One dispatched SSE event (or bare JSON line)."""
    data_lines: List[str] = field(default_factory=list)
    event: Optional[str] = None
    id: Optional[str] = None
    bare: bool = False

    @property
    def data(self) -> str:
        return "\n".join(self.data_lines)


class SSEFramer:
    """Incremental server-sent events line framer."""

    def __init__(self):
        self._buffer = ""
        self._pending = SSEMessage()

    def feed(self, text: str) -> List[SSEMessage]:
        """
        Feed decoded text and return every message it completed.

        Args:
            text: Decoded fragment, any alignment

        Returns:
            Completed messages in arrival order
        """
        if not text:
            return []
        self._buffer += text
        messages: List[SSEMessage] = []
        while True:
            newline = self._buffer.find("\n")
            if newline < 0:
                break
            line = self._buffer[:newline].rstrip("\r")
            self._buffer = self._buffer[newline + 1:]
            messages.extend(self._feed_line(line))
        return messages

    def flush(self) -> List[SSEMessage]:
        """Dispatch whatever is buffered at end of stream."""
        messages: List[SSEMessage] = []
        if self._buffer.strip():
            line = self._buffer.rstrip("\r")
            self._buffer = ""
            messages.extend(self._feed_line(line))
        self._buffer = ""
        message = self._dispatch()
        if message is not None:
            messages.append(message)
        return messages

    def reset(self) -> None:
        self._buffer = ""
        self._pending = SSEMessage()

    @property
    def buffered(self) -> str:
        return self._buffer

    def _feed_line(self, line: str) -> List[SSEMessage]:
        if line == "" or line.strip() == "":
            message = self._dispatch()
            return [message] if message is not None else []

        if line.startswith(":"):
            return []  # comment / keep-alive

        stripped = line.lstrip()
        if stripped.startswith("{") or stripped.startswith("["):
            # A bare record also ends any event still waiting for its blank line
            pending = self._dispatch()
            bare = SSEMessage(data_lines=[stripped], bare=True)
            return [pending, bare] if pending is not None else [bare]

        name, sep, value = line.partition(":")
        if not sep:
            name, value = line, ""
        elif value.startswith(" "):
            value = value[1:]

        if name == "data":
            self._pending.data_lines.append(value)
        elif name == "event":
            self._pending.event = value
        elif name == "id":
            self._pending.id = value
        # "retry" and unknown fields are ignored
        return []

    def _dispatch(self) -> Optional[SSEMessage]:
        message = self._pending
        self._pending = SSEMessage()
        if not message.data_lines:
            return None
        return message


class JsonObjectFramer:
    """
    Extracts complete top-level JSON values from a character stream.

    Text between values (newlines, whitespace, stray characters) is skipped.
    """

    start_chars = {'{', '['}
    end_chars = {'}', ']'}
    matching_pairs = {'{': '}', '[': ']'}

    def __init__(self):
        self.buffer = ""

    def feed(self, text: str) -> List[str]:
        """
        Feed decoded text and return the raw JSON strings it completed.

        Args:
            text: Decoded fragment

        Returns:
            Complete JSON value strings in arrival order
        """
        if text:
            self.buffer += text
        return self._extract()

    def flush(self) -> List[str]:
        """Return any unterminated remainder as a final (probably malformed) record."""
        remainder = self.buffer.strip()
        self.buffer = ""
        return [remainder] if remainder else []

    def reset(self) -> None:
        self.buffer = ""

    def _extract(self) -> List[str]:
        records: List[str] = []
        i = 0
        while i < len(self.buffer):
            if self.buffer[i] not in self.start_chars:
                i += 1
                continue
            end_idx = self._find_json_end(i)
            if end_idx is None:
                break
            if end_idx < 0:
                # Mismatched bracket: skip the opener and resynchronise
                i += 1
                continue
            records.append(self.buffer[i:end_idx + 1])
            i = end_idx + 1
        self.buffer = self.buffer[i:]
        return records

    def _find_json_end(self, start_idx: int) -> Optional[int]:
        """
        Find the end of the JSON value starting at ``start_idx``.

        Returns:
            End index if complete, None if more input is needed, -1 on mismatch
        """
        stack = [self.buffer[start_idx]]
        in_string = False
        escape_next = False
        i = start_idx + 1

        while i < len(self.buffer):
            char = self.buffer[i]

            if escape_next:
                escape_next = False
            elif in_string:
                if char == '\\':
                    escape_next = True
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char in self.start_chars:
                stack.append(char)
            elif char in self.end_chars:
                if char != self.matching_pairs[stack[-1]]:
                    return -1
                stack.pop()
                if not stack:
                    return i
            i += 1

        return None
