"""
Application settings and configuration management.

Uses pydantic-settings for environment variable loading.
"""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Campus2Career Interview Engine"
    app_version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # LLM gateway (OpenAI-compatible chat completions)
    llm_gateway_host: str = ""
    llm_gateway_token: str = ""

    # Model endpoints
    reasoning_endpoint: str = "/serving-endpoints/gemini-pro/invocations"
    fast_endpoint: str = "/serving-endpoints/gemini-flash/invocations"
    http_timeout_seconds: float = 60.0

    # External call budgets (seconds)
    question_timeout_seconds: float = 20.0
    oracle_timeout_seconds: float = 20.0
    synthesizer_timeout_seconds: float = 45.0

    # Interview settings
    default_total_questions: int = 10
    max_total_questions: int = 20
    default_follow_up_depth: int = 3
    max_follow_up_depth: int = 5
    follow_up_similarity_threshold: float = Field(default=0.7, ge=0.0, le=1.0)

    # Langfuse tracing
    langfuse_enabled: bool = False
    langfuse_public_key: str = ""
    langfuse_secret_key: str = ""
    langfuse_base_url: str = "https://cloud.langfuse.com"

    # CORS - stored as comma-separated string in env
    cors_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        validation_alias="cors_origins"
    )

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
