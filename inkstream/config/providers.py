# Provider catalogue for the built-in families
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


class ProviderConfig(BaseModel):
    """Static description of a provider endpoint."""
    name: str
    display_name: str
    api_endpoint: str
    default_model: str
    supported_models: List[str] = Field(default_factory=list)
    supports_thinking: bool = False
    requires_credential: bool = True
    credential_env_var: Optional[str] = None
    default_temperature: Optional[float] = None
    default_max_tokens: Optional[int] = None
    # Dotted paths (list indices as digits) checked on each record for reasoning text
    reasoning_fields: Tuple[str, ...] = ()


PROVIDER_CONFIGS: Dict[str, ProviderConfig] = {
    "openai": ProviderConfig(
        name="openai",
        display_name="OpenAI",
        api_endpoint="https://api.openai.com/v1/chat/completions",
        default_model="gpt-4o-mini",
        supported_models=["gpt-4o-mini", "gpt-4o", "gpt-4.1", "gpt-4.1-mini"],
        supports_thinking=True,
        credential_env_var="OPENAI_API_KEY",
        reasoning_fields=(
            "choices.0.delta.reasoning_content",
            "choices.0.delta.reasoning",
        ),
    ),
    "deepseek": ProviderConfig(
        name="deepseek",
        display_name="DeepSeek",
        api_endpoint="https://api.deepseek.com/v1/chat/completions",
        default_model="deepseek-chat",
        supported_models=["deepseek-chat", "deepseek-reasoner"],
        supports_thinking=True,
        credential_env_var="DEEPSEEK_API_KEY",
        default_temperature=0.7,
        default_max_tokens=2000,
        reasoning_fields=(
            "choices.0.delta.reasoning_content",
            "choices.0.delta.reasoning",
            "choices.0.delta.thinking",
            "choices.0.delta.thought",
            "choices.0.delta.reasoning-content",
        ),
    ),
    "zhipu": ProviderConfig(
        name="zhipu",
        display_name="Zhipu AI",
        api_endpoint="https://open.bigmodel.cn/api/paas/v4/chat/completions",
        default_model="glm-4",
        supported_models=["glm-4", "glm-4-plus"],
        supports_thinking=True,
        credential_env_var="ZHIPUAI_API_KEY",
        default_temperature=0.7,
        default_max_tokens=1000,
        reasoning_fields=(
            "choices.0.delta.thinking",
            "choices.0.delta.reasoning_content",
        ),
    ),
    "siliconflow": ProviderConfig(
        name="siliconflow",
        display_name="SiliconFlow",
        api_endpoint="https://api.siliconflow.cn/v1/chat/completions",
        default_model="deepseek-ai/DeepSeek-V3",
        supported_models=["deepseek-ai/DeepSeek-V3", "deepseek-ai/DeepSeek-R1", "Qwen/Qwen2.5-72B-Instruct"],
        supports_thinking=True,
        credential_env_var="SILICONFLOW_API_KEY",
        reasoning_fields=("choices.0.delta.reasoning_content",),
    ),
    "anthropic": ProviderConfig(
        name="anthropic",
        display_name="Anthropic",
        api_endpoint="https://api.anthropic.com/v1/messages",
        default_model="claude-3-5-sonnet-latest",
        supported_models=["claude-3-5-sonnet-latest", "claude-3-5-haiku-latest", "claude-3-opus-latest"],
        supports_thinking=True,
        credential_env_var="ANTHROPIC_API_KEY",
        default_max_tokens=4096,
        reasoning_fields=("delta.thinking",),
    ),
    "alibaba": ProviderConfig(
        name="alibaba",
        display_name="Alibaba DashScope",
        api_endpoint="https://dashscope.aliyuncs.com/api/v1/services/aigc/text-generation/generation",
        default_model="qwen-turbo",
        supported_models=["qwen-plus", "qwen-turbo", "qwen-max", "qwen2-72b-instruct"],
        credential_env_var="DASHSCOPE_API_KEY",
    ),
    "ollama": ProviderConfig(
        name="ollama",
        display_name="Ollama",
        api_endpoint="http://localhost:11434/api/chat",
        default_model="llama3.1",
        supports_thinking=True,
        requires_credential=False,
        reasoning_fields=("message.thinking",),
    ),
}


def get_provider_config(name: str) -> ProviderConfig:
    """Return the catalogue entry for a built-in provider."""
    try:
        return PROVIDER_CONFIGS[name]
    except KeyError:
        raise KeyError(f"No provider configuration for '{name}'") from None
