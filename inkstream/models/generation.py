from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Callable, Dict, List, Optional


class CustomProviderConfig(BaseModel):
    """User-defined OpenAI-compatible endpoint.

    The ``id`` doubles as the provider id passed to ``start_session`` and is
    expected to start with ``custom_``.
    """
    id: str = Field(..., description="Unique provider id (custom_xxx)")
    name: str = Field(..., description="Display name")
    base_url: str = Field(..., description="API base URL or full chat/completions URL")
    api_key: Optional[str] = Field(None, description="Inline API key (local servers may need none)")
    models: List[str] = Field(default_factory=list)
    default_model: str = Field(..., description="Model used when the request names none")

    @field_validator("id")
    def validate_id(cls, v):
        if not v.startswith("custom_"):
            raise ValueError("custom provider ids must start with 'custom_'")
        return v


class GenerationOptions(BaseModel):
    """
    Options for one generation session.

    Provider selection is explicit: every session names its ``provider_id``;
    there is no process-wide "current provider".
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, protected_namespaces=())

    prompt: str = Field(..., description="User prompt")
    provider_id: str = Field(..., description="Registered provider id")
    model: Optional[str] = Field(None, description="Model identifier; provider default when omitted")
    temperature: Optional[float] = Field(None, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: Optional[int] = Field(None, ge=1, description="Maximum tokens to generate")
    custom_provider: Optional[CustomProviderConfig] = Field(
        None,
        description="Endpoint definition when provider_id refers to a custom provider"
    )
    metadata: Dict[str, Any] = Field(default_factory=dict)

    # Callback contract: on_stream(answer_text, snapshot), on_complete(answer_text, snapshot),
    # on_error(error, partial_snapshot). Plain functions or coroutine functions.
    on_stream: Optional[Callable[..., Any]] = None
    on_complete: Optional[Callable[..., Any]] = None
    on_error: Optional[Callable[..., Any]] = None

    @field_validator("max_tokens")
    def validate_max_tokens(cls, v):
        if v is None:
            return v
        return min(v, 32768)

    @field_validator("provider_id")
    def normalize_provider_id(cls, v):
        return v.strip().lower()


class GenerationRequest(BaseModel):
    """Wire request accepted by the HTTP surface."""
    model_config = ConfigDict(protected_namespaces=())

    prompt: str
    provider_id: str
    model: Optional[str] = None
    temperature: Optional[float] = Field(None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(None, ge=1)
    custom_provider: Optional[CustomProviderConfig] = None

    def to_options(self, **callbacks: Any) -> GenerationOptions:
        return GenerationOptions(
            prompt=self.prompt,
            provider_id=self.provider_id,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            custom_provider=self.custom_provider,
            **callbacks,
        )
