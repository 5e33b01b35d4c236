from .providers import PROVIDER_CONFIGS, ProviderConfig, get_provider_config
from .settings import StreamSettings

__all__ = [
    "PROVIDER_CONFIGS",
    "ProviderConfig",
    "get_provider_config",
    "StreamSettings",
]
