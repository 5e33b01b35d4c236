"""
Structured logging for generation sessions.

Every line carries the session's provider, session id and model so that
interleaved concurrent sessions stay readable in a shared log.
"""

import logging
from typing import Any, Optional


class SessionLogger:
    """Structured logger bound to one session."""

    def __init__(self, provider: str, session_id: str, model: Optional[str] = None):
        """
        Initialize logger for a session.

        Args:
            provider: Provider id (e.g. "openai", "custom_local")
            session_id: Session identifier
            model: Model the session requests
        """
        self.provider = provider
        self.session_id = session_id
        self.model = model
        self.logger = logging.getLogger(f"inkstream.session.{provider}")

    def _format_message(self, message: str, **kwargs: Any) -> str:
        fields = [f"provider={self.provider}", f"session_id={self.session_id}"]
        if self.model:
            fields.append(f"model={self.model}")
        for key, value in kwargs.items():
            if value is not None:
                fields.append(f"{key}={value}")
        return f"[{' '.join(fields)}] {message}"

    def debug(self, message: str, **kwargs: Any) -> None:
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, error: Optional[BaseException] = None, **kwargs: Any) -> None:
        """Log an error; ``error`` contributes its type and message as fields."""
        if error is not None:
            kwargs["error_type"] = type(error).__name__
            kwargs["error_msg"] = str(error)
        self.logger.error(self._format_message(message, **kwargs))

    def log_retry(self, attempt: int, max_attempts: int, delay: float, error: BaseException) -> None:
        self.warning(
            f"Retrying request (attempt {attempt + 1}/{max_attempts}) in {delay:.2f}s",
            error_type=type(error).__name__,
            error_msg=str(error),
        )

    def log_streaming_metrics(
        self,
        chunks: int,
        bytes_received: int,
        answer_chars: int,
        reasoning_chars: int,
        duration: float,
        attempts: int = 1,
    ) -> None:
        """Log per-session streaming metrics at completion."""
        chars_per_second = answer_chars / duration if duration > 0 else 0
        self.info(
            "Streaming metrics",
            chunks=chunks,
            bytes=bytes_received,
            answer_chars=answer_chars,
            reasoning_chars=reasoning_chars or None,
            duration_ms=int(duration * 1000),
            chars_per_second=int(chars_per_second),
            attempts=attempts if attempts > 1 else None,
        )
