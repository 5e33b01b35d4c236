"""Shared pytest fixtures for Inkstream tests."""

import pytest
from dotenv import load_dotenv

# Load environment variables from .env file for tests
load_dotenv()

from inkstream.config.settings import StreamSettings
from inkstream.credentials import StaticCredentialSource
from inkstream.streaming.throttle import UpdateThrottle


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Mock environment variables for testing."""
    env_vars = {
        "OPENAI_API_KEY": "test-openai-key",
        "ANTHROPIC_API_KEY": "test-anthropic-key",
        "DEEPSEEK_API_KEY": "test-deepseek-key",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def settings():
    """Default settings, independent of the environment."""
    return StreamSettings()


@pytest.fixture
def credentials():
    """Credentials for every built-in provider that needs one."""
    return StaticCredentialSource({
        "openai": "sk-test",
        "deepseek": "sk-deepseek",
        "zhipu": "zhipu-key",
        "siliconflow": "sf-key",
        "anthropic": "sk-ant-test",
        "alibaba": "dashscope-key",
    })


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def throttle():
    """Throttle that lets every update through."""
    return UpdateThrottle(min_interval=0.0)
