"""Unit tests for schema-validated model calls."""

import json

import pytest
from langchain_core.language_models import FakeListLLM
from langchain_core.language_models.llms import LLM

from proposal_engine.errors import StageCallError
from proposal_engine.llm.structured import (
    LangChainStructuredCaller,
    StructuredPrompt,
    _extract_json_from_text,
    parse_json_response,
    validate_payload,
)
from proposal_engine.models import Strategy


STRATEGY_PAYLOAD = {
    "positioning": "Installer-led team",
    "gap_mitigation": "Teaming agreement",
    "value_propositions": ["Local crews"],
    "win_probability": 62.5,
}


class BrokenLLM(LLM):
    @property
    def _llm_type(self) -> str:
        return "broken"

    def _call(self, prompt, stop=None, run_manager=None, **kwargs):
        raise ConnectionError("connection refused")


class RecordingLLM(FakeListLLM):
    prompts: list[str] = []

    def _call(self, prompt, stop=None, run_manager=None, **kwargs):
        self.prompts.append(prompt)
        return super()._call(prompt, stop=stop, run_manager=run_manager, **kwargs)


class TestParseJsonResponse:
    """Tests for recovering JSON from raw model text."""

    def test_plain_object(self):
        assert parse_json_response('{"a": 1}') == {"a": 1}

    def test_code_fence(self):
        assert parse_json_response('```json\n{"a": 1}\n```') == {"a": 1}

    def test_reasoning_before_object(self):
        response = 'Let me think about this. {"a": {"b": [1, 2]}} Done.'
        assert parse_json_response(response) == {"a": {"b": [1, 2]}}

    def test_trailing_commas(self):
        assert parse_json_response('{"a": [1, 2,],}') == {"a": [1, 2]}

    def test_byte_order_mark(self):
        assert parse_json_response("\ufeff{\"a\": 1}") == {"a": 1}

    def test_braces_inside_strings(self):
        text = 'prefix {"template": "use {name} here", "n": 1} suffix'
        assert _extract_json_from_text(text) == '{"template": "use {name} here", "n": 1}'

    @pytest.mark.parametrize("response", ["", "   ", "no json at all", "[1, 2, 3]"])
    def test_unrecoverable(self, response):
        with pytest.raises(StageCallError):
            parse_json_response(response)


class TestValidatePayload:
    """Tests for schema validation at the call boundary."""

    def test_valid(self):
        strategy = validate_payload(STRATEGY_PAYLOAD, Strategy)
        assert strategy.win_probability == 62.5

    def test_out_of_range_probability(self):
        payload = dict(STRATEGY_PAYLOAD, win_probability=140)
        with pytest.raises(StageCallError, match="Strategy"):
            validate_payload(payload, Strategy)

    def test_missing_field(self):
        payload = {k: v for k, v in STRATEGY_PAYLOAD.items() if k != "positioning"}
        with pytest.raises(StageCallError, match="positioning"):
            validate_payload(payload, Strategy)


class TestLangChainStructuredCaller:
    """Tests for the LangChain-backed caller."""

    def test_returns_validated_instance(self):
        llm = FakeListLLM(responses=[json.dumps(STRATEGY_PAYLOAD)])
        caller = LangChainStructuredCaller(llm=llm)

        result = caller.call(StructuredPrompt(system="sys", user="usr"), Strategy)

        assert isinstance(result, Strategy)
        assert result.positioning == "Installer-led team"

    def test_prompt_includes_schema_and_json_instruction(self):
        llm = RecordingLLM(responses=[json.dumps(STRATEGY_PAYLOAD)], prompts=[])
        caller = LangChainStructuredCaller(llm=llm)

        caller.call(StructuredPrompt(system="You are a strategist.", user="Plan {this}"), Strategy)

        sent = llm.prompts[0]
        assert "You are a strategist." in sent
        assert "Plan {this}" in sent
        assert "ONLY a valid JSON object" in sent
        assert '"win_probability"' in sent

    def test_invalid_response_raises_stage_call_error(self):
        llm = FakeListLLM(responses=["I cannot help with that."])
        caller = LangChainStructuredCaller(llm=llm)

        with pytest.raises(StageCallError, match="Failed to parse"):
            caller.call(StructuredPrompt(system="s", user="u"), Strategy)

    def test_transport_error_raises_stage_call_error(self):
        caller = LangChainStructuredCaller(llm=BrokenLLM())

        with pytest.raises(StageCallError, match="connection refused"):
            caller.call(StructuredPrompt(system="s", user="u"), Strategy)
