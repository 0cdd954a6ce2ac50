"""Ollama LLM client configuration."""

from functools import lru_cache

from langchain_ollama import OllamaLLM
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseSettings):
    """LLM configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        extra="ignore",
    )

    ollama_base_url: str = "http://localhost:11434"
    model_name: str = "gpt-oss:20b"
    temperature: float = 0.0
    request_timeout: int = 180
    # Writing-stage prompts carry all three prior outputs plus the records
    num_ctx: int = 16384
    num_predict: int = 8192


@lru_cache
def get_llm_settings() -> LLMSettings:
    """Get cached LLM settings."""
    return LLMSettings()


def create_json_llm_client(settings: LLMSettings | None = None) -> OllamaLLM:
    """Create LLM client configured for JSON output.

    Args:
        settings: Optional custom settings. Uses defaults if not provided.

    Returns:
        OllamaLLM instance. JSON is extracted from the raw text by the
        structured caller, since not every model honours ``format="json"``.
    """
    settings = settings or get_llm_settings()

    return OllamaLLM(
        model=settings.model_name,
        base_url=settings.ollama_base_url,
        temperature=settings.temperature,
        timeout=settings.request_timeout,
        num_ctx=settings.num_ctx,
        num_predict=settings.num_predict,
        streaming=False,
    )
