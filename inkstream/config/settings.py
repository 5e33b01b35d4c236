"""
Runtime settings for streaming sessions.

Values come from ``INKSTREAM_*`` environment variables (a ``.env`` file is
honoured through python-dotenv) and fall back to the defaults below.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "INKSTREAM_"


@dataclass
class StreamSettings:
    """Tunables shared by the session, throttle, classifier and transport."""
    throttle_interval: float = 0.1
    max_attempts: int = 3
    initial_backoff: float = 0.5
    backoff_multiplier: float = 2.0
    max_backoff: float = 8.0
    connect_timeout: float = 30.0
    read_timeout: float = 300.0
    min_tag_content_length: int = 5
    encoding: str = "utf-8"

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "StreamSettings":
        """Build settings from the environment.

        Args:
            dotenv_path: Optional explicit .env file to load first

        Returns:
            StreamSettings with environment overrides applied
        """
        load_dotenv(dotenv_path)
        defaults = cls()
        return cls(
            throttle_interval=_env_float("THROTTLE_INTERVAL_MS", defaults.throttle_interval * 1000) / 1000,
            max_attempts=int(_env_float("MAX_ATTEMPTS", defaults.max_attempts)),
            initial_backoff=_env_float("INITIAL_BACKOFF", defaults.initial_backoff),
            backoff_multiplier=_env_float("BACKOFF_MULTIPLIER", defaults.backoff_multiplier),
            max_backoff=_env_float("MAX_BACKOFF", defaults.max_backoff),
            connect_timeout=_env_float("CONNECT_TIMEOUT", defaults.connect_timeout),
            read_timeout=_env_float("READ_TIMEOUT", defaults.read_timeout),
            min_tag_content_length=int(_env_float("MIN_TAG_CONTENT_LENGTH", defaults.min_tag_content_length)),
            encoding=os.getenv(ENV_PREFIX + "ENCODING", defaults.encoding),
        )


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return float(default)
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be numeric, got {raw!r}")
