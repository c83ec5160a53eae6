from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from src.errors import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    environment: str = "development"  # "development" or "production"
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/deals.db"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # SerpAPI (Google Shopping)
    serpapi_api_key: str = ""
    serpapi_base_url: str = "https://serpapi.com/search"
    serpapi_timeout: float = 30.0

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = ""
    openai_timeout: float = 60.0

    # CORS (comma-separated origins, empty means localhost only)
    cors_origins: str = ""

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()


@dataclass(frozen=True)
class SearchProviderConfig:
    endpoint: str
    api_key: str
    timeout: float

    @classmethod
    def from_settings(cls, settings: Settings) -> "SearchProviderConfig":
        if not settings.serpapi_api_key:
            raise ConfigurationError(
                "SerpAPI API key not configured",
                details="Please set SERPAPI_API_KEY in your environment variables",
            )
        return cls(
            endpoint=settings.serpapi_base_url,
            api_key=settings.serpapi_api_key,
            timeout=settings.serpapi_timeout,
        )


@dataclass(frozen=True)
class LLMConfig:
    api_key: str
    model: str
    timeout: float
    endpoint: str = ""

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMConfig":
        if not settings.openai_api_key:
            raise ConfigurationError(
                "OpenAI API key not configured",
                details="Please set OPENAI_API_KEY in your environment variables",
            )
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout=settings.openai_timeout,
            endpoint=settings.openai_base_url,
        )


def missing_credentials(settings: Settings) -> list[str]:
    """Names of the provider keys that are not set."""
    missing = []
    if not settings.serpapi_api_key:
        missing.append("SERPAPI_API_KEY")
    if not settings.openai_api_key:
        missing.append("OPENAI_API_KEY")
    return missing
