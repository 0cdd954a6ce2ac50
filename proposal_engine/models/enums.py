"""Enumeration types for the pipeline models."""

from enum import Enum


class BlockType(str, Enum):
    """Content block kinds produced by the writing stage."""

    HEADING1 = "H1"
    HEADING2 = "H2"
    HEADING3 = "H3"
    TEXT = "Text"
    FORM = "Form"

    @property
    def is_heading(self) -> bool:
        return self in (BlockType.HEADING1, BlockType.HEADING2, BlockType.HEADING3)


class FieldInputType(str, Enum):
    """Input widget for a form field."""

    TEXT = "text"
    EMAIL = "email"
    PHONE = "tel"
    DATE = "date"
    MULTILINE_TEXT = "textarea"
    SINGLE_SELECT = "select"


class FormCriticality(str, Enum):
    """How strictly a solicitation requires a form."""

    REQUIRED = "Required"
    OPTIONAL = "Optional"
    CONDITIONAL = "Conditional"


class StageName(str, Enum):
    """Ordered stages of a generation run."""

    DATA_EXTRACTION = "data_extraction"
    INSIGHT_ANALYSIS = "insight_analysis"
    STRATEGY_SYNTHESIS = "strategy_synthesis"
    DOCUMENT_WRITING = "document_writing"
    ASSEMBLY = "assembly"


STAGE_ORDER: tuple[StageName, ...] = (
    StageName.DATA_EXTRACTION,
    StageName.INSIGHT_ANALYSIS,
    StageName.STRATEGY_SYNTHESIS,
    StageName.DOCUMENT_WRITING,
    StageName.ASSEMBLY,
)


class StageStatus(str, Enum):
    """Progress state of a single stage."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    FAILED = "failed"
