"""Test doubles and block builders shared by the test suites."""

from collections import Counter
from pathlib import Path
from typing import Any, Callable, Union

from proposal_engine.errors import StageCallError
from proposal_engine.llm.structured import StructuredPrompt
from proposal_engine.models import BlockMetadata, BlockType, ContentBlock, FormField

SAMPLE_DIR = Path(__file__).parent.parent / "data" / "sample"

Response = Union[Any, Exception, Callable[[StructuredPrompt], Any]]


class FakeCaller:
    """Scripted StructuredCaller.

    Maps an output schema to the object it returns, an exception it raises,
    or a callable receiving the prompt. Every call is recorded.
    """

    def __init__(self, responses: dict[type, Response]):
        self.responses = dict(responses)
        self.prompts: list[StructuredPrompt] = []
        self.schemas: list[type] = []

    def call(self, prompt, schema):
        self.prompts.append(prompt)
        self.schemas.append(schema)
        if schema not in self.responses:
            raise StageCallError(f"No scripted response for {schema.__name__}")
        response = self.responses[schema]
        if isinstance(response, Exception):
            raise response
        if callable(response) and not isinstance(response, type):
            return response(prompt)
        return response

    @property
    def counts(self) -> Counter:
        return Counter(s.__name__ for s in self.schemas)


def text(value: str, block_id: str = "") -> ContentBlock:
    return ContentBlock(id=block_id, type=BlockType.TEXT, text=value)


def heading(level: int, value: str, block_id: str = "") -> ContentBlock:
    block_type = {1: BlockType.HEADING1, 2: BlockType.HEADING2, 3: BlockType.HEADING3}[level]
    return ContentBlock(id=block_id, type=block_type, text=value)


def form(value: str, block_id: str = "", fields=None) -> ContentBlock:
    fields = fields or [FormField(id="f1", label="Company Name", value="Acme", required=True)]
    return ContentBlock(
        id=block_id,
        type=BlockType.FORM,
        text=value,
        metadata=BlockMetadata(form_fields=fields),
    )


