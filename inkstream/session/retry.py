"""
Session retry policy.

A request is retried only while nothing has been received for it: once the
first byte arrives, partial output may already have reached the caller and a
replay would duplicate it.
"""

import random
from dataclasses import dataclass
from typing import Optional

from ..config.settings import StreamSettings
from ..providers.base import ProviderError
from ..providers.errors import TransportError


@dataclass
class SessionRetryConfig:
    """Configuration for pre-first-byte retries."""
    max_attempts: int = 3
    initial_backoff: float = 0.5
    backoff_multiplier: float = 2.0
    max_backoff: float = 8.0
    jitter_factor: float = 0.1
    respect_retry_after: bool = True

    @classmethod
    def from_settings(cls, settings: StreamSettings) -> "SessionRetryConfig":
        return cls(
            max_attempts=settings.max_attempts,
            initial_backoff=settings.initial_backoff,
            backoff_multiplier=settings.backoff_multiplier,
            max_backoff=settings.max_backoff,
        )


class RetryPolicy:
    """
    Decides whether and when a failed attempt is retried.

    This class handles:
    - Retryability (TransportError flagged retryable, before the first byte)
    - Exponential backoff with jitter
    - Respect for Retry-After values
    """

    def __init__(self, config: Optional[SessionRetryConfig] = None):
        self.config = config or SessionRetryConfig()

    def should_retry(self, error: ProviderError, attempt: int, bytes_received: int) -> bool:
        """
        Args:
            error: Failure of the attempt that just ended
            attempt: Number of attempts made so far (1-based)
            bytes_received: Bytes received during that attempt

        Returns:
            bool: True if another attempt should be made
        """
        if attempt >= self.config.max_attempts:
            return False
        if bytes_received > 0:
            return False
        return isinstance(error, TransportError) and error.is_retryable

    def compute_delay(self, attempt: int, error: Optional[ProviderError] = None) -> float:
        """Backoff before attempt ``attempt + 1``."""
        if error is not None and error.retry_after and self.config.respect_retry_after:
            base_delay = error.retry_after
        else:
            base_delay = self.config.initial_backoff * (self.config.backoff_multiplier ** (attempt - 1))
        base_delay = min(base_delay, self.config.max_backoff)

        jitter = random.uniform(-self.config.jitter_factor, self.config.jitter_factor) * base_delay
        return max(0.0, base_delay + jitter)
