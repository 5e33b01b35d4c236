"""
Credential lookup.

Credentials are resolved per provider at session start. The built-in source
reads environment variables (after loading a ``.env`` file); callers with
their own secret store implement ``CredentialSource``.
"""

import os
from abc import ABC, abstractmethod
from typing import Dict, Optional

from dotenv import load_dotenv

from .config.providers import PROVIDER_CONFIGS


class CredentialSource(ABC):
    """Resolves the credential for a provider id."""

    @abstractmethod
    def get_credential(self, provider_id: str) -> Optional[str]:
        """Return the credential, or None when none is configured."""


class EnvCredentialSource(CredentialSource):
    """Reads ``<PROVIDER>_API_KEY`` style environment variables."""

    def __init__(self, dotenv_path: Optional[str] = None, load_env_file: bool = True):
        if load_env_file:
            load_dotenv(dotenv_path)

    def get_credential(self, provider_id: str) -> Optional[str]:
        env_var = self.env_var_for(provider_id)
        value = os.getenv(env_var) if env_var else None
        if value is not None:
            value = value.strip()
        return value or None

    @staticmethod
    def env_var_for(provider_id: str) -> Optional[str]:
        """Environment variable holding the key for ``provider_id``."""
        config = PROVIDER_CONFIGS.get(provider_id)
        if config is not None:
            return config.credential_env_var
        if provider_id.startswith("custom_"):
            return f"INKSTREAM_{provider_id.upper()}_API_KEY"
        return None


class StaticCredentialSource(CredentialSource):
    """Fixed credentials, mainly for tests and embedding."""

    def __init__(self, credentials: Optional[Dict[str, str]] = None):
        self._credentials = dict(credentials or {})

    def get_credential(self, provider_id: str) -> Optional[str]:
        return self._credentials.get(provider_id) or None
