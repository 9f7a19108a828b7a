from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RouterConfig(BaseSettings):
    """Provider router tuning shared by every wire adapter."""

    timeout_seconds: float = Field(default=30.0, gt=0)
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1200, ge=1, le=32768)
    max_request_signals: int = Field(
        default=300,
        ge=1,
        description="Raw signal lines accepted per request before context truncation.",
    )
    max_request_history: int = Field(default=5, ge=0)
    max_body_bytes: int = Field(default=1024 * 1024, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="ROUTER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class ProvidersConfig(BaseSettings):
    """Credentials, endpoint and model overrides for every LLM backend.

    Field aliases are the environment variable names the provider registry
    looks up, so ``as_mapping()`` can be handed straight to
    ``provider_registry.resolve``.
    """

    groq_api_key: Optional[str] = Field(default=None, validation_alias="GROQ_API_KEY")
    groq_base_url: Optional[str] = Field(default=None, validation_alias="GROQ_BASE_URL")
    groq_model: Optional[str] = Field(default=None, validation_alias="GROQ_MODEL")

    gemini_api_key: Optional[str] = Field(default=None, validation_alias="GEMINI_API_KEY")
    gemini_base_url: Optional[str] = Field(default=None, validation_alias="GEMINI_BASE_URL")
    gemini_model: Optional[str] = Field(default=None, validation_alias="GEMINI_MODEL")

    mistral_api_key: Optional[str] = Field(default=None, validation_alias="MISTRAL_API_KEY")
    mistral_base_url: Optional[str] = Field(default=None, validation_alias="MISTRAL_BASE_URL")
    mistral_model: Optional[str] = Field(default=None, validation_alias="MISTRAL_MODEL")

    cohere_api_key: Optional[str] = Field(default=None, validation_alias="COHERE_API_KEY")
    cohere_base_url: Optional[str] = Field(default=None, validation_alias="COHERE_BASE_URL")
    cohere_model: Optional[str] = Field(default=None, validation_alias="COHERE_MODEL")

    codestral_api_key: Optional[str] = Field(default=None, validation_alias="CODESTRAL_API_KEY")
    codestral_base_url: Optional[str] = Field(default=None, validation_alias="CODESTRAL_BASE_URL")
    codestral_model: Optional[str] = Field(default=None, validation_alias="CODESTRAL_MODEL")

    nvidia_api_key: Optional[str] = Field(default=None, validation_alias="NVIDIA_NIM_API_KEY")
    nvidia_base_url: Optional[str] = Field(default=None, validation_alias="NVIDIA_NIM_BASE_URL")
    nvidia_model: Optional[str] = Field(default=None, validation_alias="NVIDIA_NIM_MODEL")

    cerebras_api_key: Optional[str] = Field(default=None, validation_alias="CEREBRAS_API_KEY")
    cerebras_base_url: Optional[str] = Field(default=None, validation_alias="CEREBRAS_BASE_URL")
    cerebras_model: Optional[str] = Field(default=None, validation_alias="CEREBRAS_MODEL")

    huggingface_api_key: Optional[str] = Field(
        default=None, validation_alias="HUGGINGFACE_API_KEY"
    )
    huggingface_base_url: Optional[str] = Field(
        default=None, validation_alias="HUGGINGFACE_BASE_URL"
    )
    huggingface_model: Optional[str] = Field(default=None, validation_alias="HUGGINGFACE_MODEL")

    cloudflare_api_key: Optional[str] = Field(
        default=None, validation_alias="CLOUDFLARE_API_KEY"
    )
    cloudflare_account_id: Optional[str] = Field(
        default=None, validation_alias="CLOUDFLARE_ACCOUNT_ID"
    )
    cloudflare_base_url: Optional[str] = Field(
        default=None, validation_alias="CLOUDFLARE_BASE_URL"
    )
    cloudflare_model: Optional[str] = Field(default=None, validation_alias="CLOUDFLARE_MODEL")

    ollama_enabled: Optional[str] = Field(default=None, validation_alias="OLLAMA_ENABLED")
    ollama_api_key: Optional[str] = Field(default=None, validation_alias="OLLAMA_API_KEY")
    ollama_base_url: Optional[str] = Field(default=None, validation_alias="OLLAMA_BASE_URL")
    ollama_model: Optional[str] = Field(default=None, validation_alias="OLLAMA_MODEL")

    opencode_api_key: Optional[str] = Field(default=None, validation_alias="OPENCODE_API_KEY")
    opencode_base_url: Optional[str] = Field(default=None, validation_alias="OPENCODE_BASE_URL")
    opencode_model: Optional[str] = Field(default=None, validation_alias="OPENCODE_MODEL")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        case_sensitive=False,
        extra="ignore",
    )

    def as_mapping(self) -> dict[str, str]:
        """Flatten populated fields into ``{ENV_NAME: value}``."""

        mapping: dict[str, str] = {}
        for field_name, field_info in type(self).model_fields.items():
            value = getattr(self, field_name)
            if value is None:
                continue
            text = str(value).strip()
            if not text:
                continue
            mapping[str(field_info.validation_alias)] = text
        return mapping


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Signal Router"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000
    log_file: str = "logs/app.log"
    router_log_file: str = "logs/router.log"

    # Router
    router: RouterConfig = Field(default_factory=RouterConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = False
    cors_allow_methods: list[str] = ["GET", "POST", "OPTIONS"]
    cors_allow_headers: list[str] = ["content-type"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
