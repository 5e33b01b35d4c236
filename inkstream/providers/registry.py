"""
Provider registry.

Provider families register themselves with ``@register_provider``; sessions
look adapters up by the provider id they are given. There is no notion of a
current or default provider.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Type

from ..config.providers import get_provider_config
from ..models.generation import CustomProviderConfig
from .base import ProviderAdapter

logger = logging.getLogger(__name__)

CUSTOM_PREFIX = "custom_"

_ADAPTERS: Dict[str, Type[ProviderAdapter]] = {}


def register_provider(*provider_ids: str) -> Callable[[Type[ProviderAdapter]], Type[ProviderAdapter]]:
    """Class decorator registering an adapter variant for one or more provider ids."""
    def decorator(cls: Type[ProviderAdapter]) -> Type[ProviderAdapter]:
        for provider_id in provider_ids:
            if provider_id in _ADAPTERS and _ADAPTERS[provider_id] is not cls:
                raise ValueError(f"Provider '{provider_id}' is already registered to {_ADAPTERS[provider_id].__name__}")
            _ADAPTERS[provider_id] = cls
        return cls
    return decorator


def get_adapter(provider_id: str, custom_provider: Optional[CustomProviderConfig] = None) -> ProviderAdapter:
    """
    Build the adapter for ``provider_id``.

    Args:
        provider_id: Registered id, or a ``custom_*`` id
        custom_provider: Endpoint definition, required for ``custom_*`` ids

    Returns:
        ProviderAdapter instance

    Raises:
        ValueError: Unknown provider id or missing custom definition
    """
    provider_id = provider_id.strip().lower()
    if provider_id.startswith(CUSTOM_PREFIX):
        if custom_provider is None or custom_provider.id.lower() != provider_id:
            raise ValueError(f"Custom provider '{provider_id}' requires a matching custom_provider definition")
        from .openai.adapter import CustomEndpointAdapter
        return CustomEndpointAdapter(custom_provider)

    cls = _ADAPTERS.get(provider_id)
    if cls is None:
        raise ValueError(f"Unknown provider '{provider_id}'. Available: {', '.join(sorted(_ADAPTERS))}")
    return cls(get_provider_config(provider_id))


def list_providers() -> List[Dict[str, Any]]:
    """Describe every registered built-in provider."""
    return [get_adapter(provider_id).describe() for provider_id in sorted(_ADAPTERS)]


def registered_provider_ids() -> List[str]:
    return sorted(_ADAPTERS)
