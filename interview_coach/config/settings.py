"""
Application settings and configuration management.

Uses pydantic-settings for environment variable loading.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnswerRevisionPolicy(str, Enum):
    """What happens when an already-answered question receives another answer."""

    REJECT = "reject"  # Conflict error, original answer untouched
    KEEP_FIRST = "keep_first"  # First answer is terminal, its feedback is returned again


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "InterviewCoach"
    app_version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./data/interview_coach.db"

    # Generation service (OpenAI-compatible chat completions endpoint)
    llm_host: str = ""
    llm_token: str = ""
    llm_endpoint: str = "/serving-endpoints/databricks-gemini-flash/invocations"
    llm_temperature: float = 0.7

    # Generation limits
    generation_timeout_seconds: float = 90.0  # Whole call, all attempts included
    generation_request_timeout_seconds: float = 30.0  # Single HTTP attempt
    generation_max_attempts: int = Field(default=3, ge=1)

    # Langfuse tracing
    langfuse_enabled: bool = False
    langfuse_public_key: str = ""
    langfuse_secret_key: str = ""
    langfuse_base_url: str = "https://cloud.langfuse.com"

    # Interview settings
    default_question_count: int = 5
    answer_revision_policy: AnswerRevisionPolicy = AnswerRevisionPolicy.REJECT

    # Allowed question counts - stored as comma-separated string in env
    question_count_options_str: str = Field(
        default="3,5,7,10",
        validation_alias="question_count_options"
    )

    # CORS - stored as comma-separated string in env
    # Uses validation_alias to read from CORS_ORIGINS env var
    cors_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        validation_alias="cors_origins"
    )

    @field_validator("question_count_options_str")
    @classmethod
    def _validate_question_count_options(cls, value: str) -> str:
        """Every menu entry must be a positive integer."""
        try:
            options = [int(option.strip()) for option in value.split(",") if option.strip()]
        except ValueError as e:
            raise ValueError(f"question_count_options must be comma-separated integers, got {value!r}") from e

        if not options:
            raise ValueError("question_count_options must list at least one count")
        if min(options) < 1:
            raise ValueError(f"question counts must be at least 1, got {min(options)}")
        return value

    @computed_field
    @property
    def question_count_options(self) -> list[int]:
        """Parse the question count menu from comma-separated string."""
        return sorted({
            int(option.strip())
            for option in self.question_count_options_str.split(",")
            if option.strip()
        })

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
