"""Application configuration."""

import os

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float | None = 0.2
    openai_reasoning_effort: str | None = None
    openai_store: bool = False
    openai_timeout_seconds: float = 30.0
    fdc_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("fdc_api_key", "usda_fdc_api_key"),
    )
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    fdc_data_types: str = "SR Legacy,Foundation,Survey (FNDDS)"
    fdc_timeout_seconds: float = 15.0
    lookup_concurrency: int = 4
    lookup_retry_attempts: int = 1
    lookup_retry_delay_seconds: float = 0.3
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def missing_credentials(self) -> list[str]:
        """Return env var names of required credentials that are not set."""
        missing: list[str] = []
        if not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if not self.fdc_api_key:
            missing.append("FDC_API_KEY")
        return missing


def parse_data_types(raw: str | None) -> tuple[str, ...]:
    """Parse a comma-separated list of FDC dataset types."""
    if raw is None:
        return ()
    return tuple(chunk.strip() for chunk in raw.split(",") if chunk.strip())
