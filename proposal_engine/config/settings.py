"""Application settings using Pydantic."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Ollama LLM Configuration
    llm_ollama_base_url: str = "http://localhost:11434"
    llm_model_name: str = "gpt-oss:20b"
    llm_temperature: float = 0.0
    llm_request_timeout: int = 180
    llm_num_ctx: int = 16384
    llm_num_predict: int = 8192

    # Document enrichment
    document_allowed_hosts: list[str] = [
        "vercel-storage.com",
        "sam.gov",
        "github.com",
        "githubusercontent.com",
    ]
    document_max_bytes: int = 10 * 1024 * 1024
    document_fetch_concurrency: int = 3
    document_fetch_timeout: float = 30.0
    document_fetch_attempts: int = 3
    document_fetch_backoff: float = 0.5
    document_content_char_limit: int = 50_000

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    session_log_dir: Optional[str] = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
