"""Schema-validated model calls.

Every pipeline stage talks to the model through a ``StructuredCaller``: a
prompt goes in, an instance of the requested pydantic schema comes out, or a
``StageCallError`` is raised. Calls are single-shot; nothing here retries.
"""

import json
import re
from dataclasses import dataclass
from typing import Protocol, TypeVar

import structlog
from langchain_core.language_models import BaseLLM
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, ValidationError

from proposal_engine.config.prompts import JSON_ONLY_INSTRUCTION, build_format_instructions
from proposal_engine.errors import StageCallError
from proposal_engine.llm.client import create_json_llm_client

logger = structlog.get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class StructuredPrompt:
    """System and user text for one model call."""

    system: str
    user: str
    name: str = "call"


class StructuredCaller(Protocol):
    """Anything that can turn a prompt into a validated schema instance."""

    def call(self, prompt: StructuredPrompt, schema: type[T]) -> T:
        ...


# =============================================================================
# JSON extraction from raw model text
# =============================================================================

def _extract_json_from_text(text: str) -> str | None:
    """Return the first balanced top-level JSON object in ``text``.

    Braces inside string literals are ignored so that prose such as
    ``"use {placeholders}"`` inside a value does not break matching.
    """
    brace_count = 0
    start_idx = None
    in_string = False
    escape_next = False

    for i, char in enumerate(text):
        if escape_next:
            escape_next = False
            continue
        if char == "\\" and in_string:
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue

        if char == "{":
            if brace_count == 0:
                start_idx = i
            brace_count += 1
        elif char == "}":
            brace_count -= 1
            if brace_count == 0 and start_idx is not None:
                return text[start_idx:i + 1]

    return None


def _clean_json_string(text: str) -> str:
    """Strip BOM/zero-width characters and trailing commas."""
    text = text.strip("\ufeff\u200b\u200c\u200d")
    return re.sub(r",(\s*[}\]])", r"\1", text)


def parse_json_response(response: str) -> dict:
    """Parse a JSON object out of a model response.

    Handles code fences and reasoning text before the object.

    Raises:
        StageCallError: If no JSON object can be recovered.
    """
    if not response or not response.strip():
        raise StageCallError("Empty response from model")

    text = response.strip()

    fenced = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text, re.IGNORECASE)
    if fenced and fenced.group(1).strip().startswith("{"):
        text = fenced.group(1).strip()

    try:
        parsed = json.loads(_clean_json_string(text))
    except json.JSONDecodeError as e:
        logger.debug("direct_parse_failed", error=str(e))
    else:
        if isinstance(parsed, dict):
            return parsed

    extracted = _extract_json_from_text(text)
    if extracted:
        try:
            return json.loads(_clean_json_string(extracted))
        except json.JSONDecodeError as e:
            logger.debug("extracted_parse_failed", error=str(e))

    logger.error("json_parse_error", response_preview=text[:300])
    raise StageCallError(f"Failed to parse model JSON response. Response preview: {text[:150]}")


def validate_payload(payload: dict, schema: type[T]) -> T:
    """Validate a parsed payload, converting schema violations to StageCallError."""
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise StageCallError(
            f"Response does not match {schema.__name__}: {e.error_count()} validation error(s); "
            f"first: {e.errors()[0]['msg']} at {'.'.join(str(p) for p in e.errors()[0]['loc'])}"
        ) from e


# =============================================================================
# LangChain-backed caller
# =============================================================================

_PROMPT = ChatPromptTemplate.from_messages([
    ("system", "{system}"),
    ("human", "{user}"),
])


class LangChainStructuredCaller:
    """Structured caller over ``prompt | llm | StrOutputParser()``.

    Prompt text is passed as template variables, so literal braces in JSON
    embedded in prompts need no escaping.
    """

    def __init__(self, llm: BaseLLM | None = None):
        self._llm = llm or create_json_llm_client()
        self._chain = _PROMPT | self._llm | StrOutputParser()

    def call(self, prompt: StructuredPrompt, schema: type[T]) -> T:
        system = "\n\n".join([prompt.system, JSON_ONLY_INSTRUCTION])
        user = "\n\n".join([prompt.user, build_format_instructions(schema)])

        logger.debug(
            "structured_call_start",
            call=prompt.name,
            schema=schema.__name__,
            prompt_length=len(system) + len(user),
        )

        try:
            response = self._chain.invoke({"system": system, "user": user})
        except Exception as e:
            # Transport and provider errors surface as a stage failure
            raise StageCallError(f"Model call failed: {type(e).__name__}: {e}") from e

        logger.debug(
            "structured_call_response",
            call=prompt.name,
            response_length=len(response) if response else 0,
        )

        return validate_payload(parse_json_response(response), schema)
