"""Per-session generation state."""

from enum import Enum
from typing import Dict, Optional, Set

from ..providers.base import ErrorKind


class SessionStatus(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = {SessionStatus.COMPLETED, SessionStatus.FAILED, SessionStatus.CANCELLED}

ALLOWED_TRANSITIONS: Dict[SessionStatus, Set[SessionStatus]] = {
    SessionStatus.IDLE: {SessionStatus.STREAMING, SessionStatus.FAILED, SessionStatus.CANCELLED},
    SessionStatus.STREAMING: TERMINAL_STATUSES,
    SessionStatus.COMPLETED: set(),
    SessionStatus.FAILED: set(),
    SessionStatus.CANCELLED: set(),
}


class GenerationState:
    """
    Accumulated output of one session.

    ``answer_text`` and ``reasoning_text`` only ever grow: assigning a value
    that does not extend the current text raises ``ValueError``. ``reset`` is
    the one operation allowed to clear them.
    """

    def __init__(self):
        self._answer_text = ""
        self._reasoning_text = ""
        self.is_streaming = False
        self.is_done = False
        self.last_error: Optional[ErrorKind] = None
        self.bytes_received = 0
        self.chunks_received = 0
        self.status = SessionStatus.IDLE

    @property
    def answer_text(self) -> str:
        return self._answer_text

    @answer_text.setter
    def answer_text(self, value: str) -> None:
        self._answer_text = _grow("answer_text", self._answer_text, value)

    @property
    def reasoning_text(self) -> str:
        return self._reasoning_text

    @reasoning_text.setter
    def reasoning_text(self, value: str) -> None:
        self._reasoning_text = _grow("reasoning_text", self._reasoning_text, value)

    def append_answer(self, delta: Optional[str]) -> None:
        if delta:
            self._answer_text += delta

    def append_reasoning(self, delta: Optional[str]) -> None:
        if delta:
            self._reasoning_text += delta

    def record_chunk(self, size: int) -> None:
        self.bytes_received += size
        self.chunks_received += 1

    def transition(self, new_status: SessionStatus) -> None:
        """
        Move to ``new_status``.

        Raises:
            RuntimeError: The transition is not allowed from the current status
        """
        if new_status not in ALLOWED_TRANSITIONS[self.status]:
            raise RuntimeError(f"Illegal session transition {self.status.value} -> {new_status.value}")
        self.status = new_status
        self.is_streaming = new_status == SessionStatus.STREAMING
        self.is_done = new_status.is_terminal

    def reset(self) -> None:
        self._answer_text = ""
        self._reasoning_text = ""
        self.is_streaming = False
        self.is_done = False
        self.last_error = None
        self.bytes_received = 0
        self.chunks_received = 0
        self.status = SessionStatus.IDLE


def _grow(name: str, current: str, value: str) -> str:
    if not value.startswith(current):
        raise ValueError(f"{name} may only grow; use reset() to clear it")
    return value
