from functools import lru_cache
import json
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_ALLOWED_MODELS = {
    "claude": ["claude-3-5-haiku-20241022", "claude-3-5-sonnet-20241022"],
    "gemini": ["gemini-1.5-flash", "gemini-1.5-pro"],
}


def _parse_list_value(value: str) -> list[str]:
    if not value:
        return []
    raw = value.strip()
    if raw == "":
        return []
    try:
        parsed = json.loads(raw)
        if isinstance(parsed, list):
            return [str(item).strip().lower() for item in parsed if str(item).strip()]
    except ValueError:
        pass
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


def _parse_models_value(value: str) -> dict[str, list[str]]:
    """Parse ``{"claude": ["m1"]}`` JSON or ``claude:m1|m2,gemini:m3``."""
    if not value or not value.strip():
        return {}
    raw = value.strip()
    try:
        parsed = json.loads(raw)
        if isinstance(parsed, dict):
            return {
                str(provider).lower(): [str(m).strip() for m in names if str(m).strip()]
                for provider, names in parsed.items()
                if isinstance(names, list)
            }
    except ValueError:
        pass
    models: dict[str, list[str]] = {}
    for chunk in raw.split(","):
        provider, _, names = chunk.partition(":")
        if provider.strip() and names.strip():
            models[provider.strip().lower()] = [n.strip() for n in names.split("|") if n.strip()]
    return models


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        validate_by_name=True,
        populate_by_name=True,
    )

    llm_provider: str = Field(
        default="mock",
        validation_alias=AliasChoices("NAVCADDY_LLM_PROVIDER", "LLM_PROVIDER"),
    )
    llm_model: str = Field(
        default="",
        validation_alias=AliasChoices("NAVCADDY_LLM_MODEL", "LLM_MODEL"),
    )
    llm_timeout_seconds: float = Field(
        default=3.0,
        validation_alias=AliasChoices("NAVCADDY_LLM_TIMEOUT_SECONDS"),
    )
    llm_temperature: float = Field(
        default=0.0,
        validation_alias=AliasChoices("NAVCADDY_LLM_TEMPERATURE"),
    )
    llm_max_tokens: int = Field(
        default=512,
        validation_alias=AliasChoices("NAVCADDY_LLM_MAX_TOKENS"),
    )
    enable_llm_overrides: bool = Field(
        default=False,
        validation_alias=AliasChoices("NAVCADDY_ENABLE_LLM_OVERRIDES"),
    )
    llm_allowed_providers_raw: str = Field(
        default="mock,claude,gemini",
        validation_alias=AliasChoices("NAVCADDY_LLM_ALLOWED_PROVIDERS"),
    )
    llm_allowed_models_raw: str = Field(
        default="",
        validation_alias=AliasChoices("NAVCADDY_LLM_ALLOWED_MODELS"),
    )

    anthropic_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("ANTHROPIC_API_KEY"),
    )
    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    )

    retry_base_backoff_ms: int = Field(
        default=250,
        validation_alias=AliasChoices("NAVCADDY_RETRY_BASE_BACKOFF_MS"),
    )
    retry_max_backoff_ms: int = Field(
        default=5000,
        validation_alias=AliasChoices("NAVCADDY_RETRY_MAX_BACKOFF_MS"),
    )
    retry_max_attempts: int = Field(
        default=3,
        validation_alias=AliasChoices("NAVCADDY_RETRY_MAX_ATTEMPTS"),
    )
    retry_state_capacity: int = Field(
        default=1024,
        validation_alias=AliasChoices("NAVCADDY_RETRY_STATE_CAPACITY"),
    )

    conversation_history_size: int = Field(
        default=10,
        validation_alias=AliasChoices("NAVCADDY_CONVERSATION_HISTORY_SIZE"),
    )

    analytics_redact_pii: bool = Field(
        default=True,
        validation_alias=AliasChoices("NAVCADDY_ANALYTICS_REDACT_PII", "PII_REDACTION_ENABLED"),
    )

    database_url: str = Field(
        default="sqlite://",
        validation_alias=AliasChoices("NAVCADDY_DATABASE_URL", "DATABASE_URL"),
    )

    @field_validator("llm_provider")
    @classmethod
    def _lower_provider(cls, value: str) -> str:
        return value.lower().strip()

    @field_validator("retry_max_attempts", "retry_state_capacity", "conversation_history_size")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        return max(1, int(value))

    @property
    def llm_allowed_providers(self) -> list[str]:
        return _parse_list_value(self.llm_allowed_providers_raw)

    @property
    def llm_allowed_models(self) -> dict[str, list[str]]:
        return _parse_models_value(self.llm_allowed_models_raw) or dict(_DEFAULT_ALLOWED_MODELS)


@lru_cache
def get_settings() -> Settings:
    return Settings()
