"""Engine configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROVIDERS = {"huggingface", "ollama", "local"}


def _read_secret_file(path: str, env_name: str) -> str:
    """Read a secret value from file and return stripped content."""
    try:
        value = Path(path).read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ValueError(f"{env_name} points to unreadable file: {path}") from exc

    if not value:
        raise ValueError(f"{env_name} points to empty file: {path}")

    return value


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = Field(default="development", description="Environment: development, stage, prod")
    debug: bool = Field(default=False, description="Debug mode")

    # Classification capability
    classifier_provider: str = Field(
        default="huggingface",
        description="Classification provider: huggingface, ollama, or local",
    )
    huggingface_api_key: str = Field(default="", description="Hugging Face Inference API token")
    huggingface_api_key_file: str | None = Field(
        default=None,
        description="Optional file path containing the Hugging Face token (Docker secret pattern)",
    )
    huggingface_base_url: str = Field(
        default="https://api-inference.huggingface.co/models",
        description="Hugging Face Inference API base URL",
    )
    ollama_base_url: str = Field(default="http://ollama:11434", description="Ollama base URL")
    ollama_model: str = Field(default="mistral", description="Primary Ollama model")
    ollama_fallback_model: str = Field(default="llama3", description="Fallback Ollama model")

    # Classification pacing
    classification_timeout: float = Field(
        default=30.0, gt=0, description="Timeout for a single external classification call (s)"
    )
    classification_pacing_seconds: float = Field(
        default=0.1, ge=0, description="Minimum interval between external classification calls (s)"
    )
    max_concurrent_classifications: int = Field(
        default=1, description="Concurrent in-flight external classification calls (1-4)"
    )

    # Segmentation
    max_scenes: int = Field(default=20, ge=1, description="Maximum number of scenes per document")
    min_scene_length: int = Field(
        default=50, ge=0, description="Marker-pass spans at or below this length are noise"
    )
    default_language: str = Field(default="en", description="Baseline document language")

    # Pipeline
    pipeline_timeout_seconds: float | None = Field(
        default=None, description="Overall deadline for one pipeline run (s)"
    )

    # Observability
    metrics_enabled: bool = Field(default=True, description="Record Prometheus metrics")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("classifier_provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: Any) -> str:
        """Lower-case the provider name and reject unknown providers."""
        value = str(v).strip().lower()
        if value not in _PROVIDERS:
            raise ValueError(
                f"Invalid classifier provider: {value}. Valid options: {', '.join(sorted(_PROVIDERS))}"
            )
        return value

    @field_validator("max_concurrent_classifications")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        """Keep the in-flight call budget between 1 and 4."""
        if not 1 <= v <= 4:
            raise ValueError("MAX_CONCURRENT_CLASSIFICATIONS must be between 1 and 4")
        return v

    @field_validator("default_language", mode="before")
    @classmethod
    def normalize_language(cls, v: Any) -> str:
        """Store language codes lower-cased."""
        return str(v).strip().lower()

    @model_validator(mode="before")
    @classmethod
    def load_secrets_from_files(cls, data: Any) -> Any:
        """Allow *_FILE settings to populate sensitive values from mounted secrets."""
        if not isinstance(data, dict):
            return data

        settings = dict(data)
        file_mapping = {
            "huggingface_api_key_file": "huggingface_api_key",
        }

        for file_field, target_field in file_mapping.items():
            file_path = settings.get(file_field)
            if file_path:
                settings[target_field] = _read_secret_file(file_path, file_field.upper())

        return settings

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env in {"prod", "production"}

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.env == "development"

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Enforce complete settings when running in production."""
        if not self.is_production:
            return self

        if self.classifier_provider == "huggingface" and not self.huggingface_api_key:
            raise ValueError("HUGGINGFACE_API_KEY is required in production")

        if self.debug:
            raise ValueError("DEBUG must be false in production")

        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
