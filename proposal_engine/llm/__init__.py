"""LLM client and schema-validated calls."""

from .client import LLMSettings, create_json_llm_client, get_llm_settings
from .structured import (
    LangChainStructuredCaller,
    StructuredCaller,
    StructuredPrompt,
    parse_json_response,
    validate_payload,
)

__all__ = [
    "LLMSettings",
    "create_json_llm_client",
    "get_llm_settings",
    "LangChainStructuredCaller",
    "StructuredCaller",
    "StructuredPrompt",
    "parse_json_response",
    "validate_payload",
]
