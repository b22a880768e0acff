from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Resolver configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    env: str = Field(default="dev", alias="APP_ENV")
    debug: bool = Field(default=False, alias="APP_DEBUG")

    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    openai_base_url: Optional[str] = Field(default=None, alias="OPENAI_BASE_URL")
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")
    openai_temperature: float = Field(default=0.3, alias="OPENAI_TEMPERATURE")

    google_places_api_key: str = Field(default="", alias="GOOGLE_PLACES_API_KEY")
    places_base_url: str = Field(default="https://maps.googleapis.com/maps/api", alias="PLACES_BASE_URL")
    http_timeout_seconds: float = Field(default=15.0, alias="HTTP_TIMEOUT_SECONDS")

    # Upper bound for a single extractor/geocoder call made by the engine
    external_call_timeout_seconds: float = Field(default=20.0, alias="EXTERNAL_CALL_TIMEOUT_SECONDS")
    external_min_confidence: float = Field(default=0.7, alias="EXTERNAL_MIN_CONFIDENCE")
    fuzzy_min_score: float = Field(default=0.5, alias="FUZZY_MIN_SCORE")
    cache_ttl_seconds: float = Field(default=24 * 60 * 60, alias="RESOLUTION_CACHE_TTL_SECONDS")

    synonyms_overlay_path: Optional[str] = Field(default=None, alias="SYNONYMS_OVERLAY_PATH")

    # LangSmith / LangChain tracing
    langsmith_api_key: str | None = Field(default=None, alias="LANGSMITH_API_KEY")
    langsmith_project: str | None = Field(default=None, alias="LANGSMITH_PROJECT")
    langsmith_tracing_v2: bool = Field(default=False, alias="LANGCHAIN_TRACING_V2")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
