"""
Application Settings

Centralized configuration using Pydantic Settings for type safety and validation.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with validation and type safety."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Required settings
    serper_api_key: str

    # Model settings
    model_type: Literal["ollama", "bedrock"] = "bedrock"
    model_temperature: float = 0.0

    # Bedrock settings
    bedrock_model: str = "us.anthropic.claude-sonnet-4-20250514-v1:0"

    # Ollama settings
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "gpt-oss:20b"

    # Agent loop settings
    max_steps: int = 10
    search_results_count: int = 10

    # Crawler settings
    crawler_timeout: float = 30.0
    crawler_max_retries: int = 3
    crawler_max_content_length: int = 12000
    crawler_user_agent: str = "DeepSearchBot/1.0 (+https://github.com/deep-search)"
    respect_robots_txt: bool = True

    # Search cache settings
    search_cache_dir: str = "cache"
    search_cache_ttl_hours: float = 24


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore
