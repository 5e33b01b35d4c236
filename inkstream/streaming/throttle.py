"""Per-session update throttling."""

import logging
import threading
import time
from typing import Callable, Dict

logger = logging.getLogger(__name__)


class UpdateThrottle:
    """
    Rate-limits intermediate UI updates per session.

    One instance may be shared by every live session. Entries are keyed by
    session id and are removed on the terminal emission or on ``release``,
    so finished sessions leave nothing behind.
    """

    def __init__(self, min_interval: float = 0.1, clock: Callable[[], float] = time.monotonic):
        """Initialize the throttle.

        Args:
            min_interval: Minimum seconds between two non-terminal emissions
            clock: Monotonic time source (injectable for tests)
        """
        self.min_interval = min_interval
        self._clock = clock
        self._last_emit: Dict[str, float] = {}
        self._lock = threading.Lock()

    def should_emit(self, session_id: str, is_terminal: bool = False) -> bool:
        """
        Decide whether an update for ``session_id`` may be emitted now.

        Terminal updates always pass and clear the session's entry.

        Args:
            session_id: Session the update belongs to
            is_terminal: True for the final (completion) update

        Returns:
            bool: True if the caller should emit
        """
        with self._lock:
            if is_terminal:
                self._last_emit.pop(session_id, None)
                return True

            now = self._clock()
            last = self._last_emit.get(session_id)
            if last is not None and now - last < self.min_interval:
                return False
            self._last_emit[session_id] = now
            return True

    def release(self, session_id: str) -> None:
        """Forget a session (cancellation or failure)."""
        with self._lock:
            if self._last_emit.pop(session_id, None) is not None:
                logger.debug(f"Released throttle entry for session {session_id}")

    @property
    def active_sessions(self) -> int:
        with self._lock:
            return len(self._last_emit)


_default_throttles: Dict[float, UpdateThrottle] = {}
_default_lock = threading.Lock()


def get_default_throttle(min_interval: float = 0.1) -> UpdateThrottle:
    """Process-wide throttle for ``min_interval``, shared by sessions that are not given one."""
    with _default_lock:
        throttle = _default_throttles.get(min_interval)
        if throttle is None:
            throttle = UpdateThrottle(min_interval=min_interval)
            _default_throttles[min_interval] = throttle
        return throttle
