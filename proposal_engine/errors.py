"""Exception hierarchy for proposal generation."""

from typing import Optional

from proposal_engine.models.enums import StageName


class PipelineError(Exception):
    """Pipeline-level failure naming the stage that halted the run."""

    def __init__(self, message: str, stage: Optional[StageName] = None):
        super().__init__(message)
        self.stage = stage

    @property
    def reason(self) -> str:
        return str(self)


class StageCallError(PipelineError):
    """The model call for a stage failed or returned an unusable response."""


class AssemblyError(PipelineError):
    """The flat block list could not be assembled into a document tree."""

    def __init__(self, message: str):
        super().__init__(message, stage=StageName.ASSEMBLY)


class PipelineCancelled(PipelineError):
    """The run was cancelled at a stage boundary."""


class EnrichmentError(Exception):
    """A single solicitation document could not be fetched or analysed.

    Never halts the core pipeline; the affected document is dropped.
    """

    def __init__(self, message: str, document_id: Optional[str] = None):
        super().__init__(message)
        self.document_id = document_id


class DocumentFetchError(EnrichmentError):
    """Download rejected or failed (host, scheme, size, HTTP status)."""


class DocumentEditError(Exception):
    """An edit could not be applied to a generated document."""


class ExportError(Exception):
    """A document could not be exported."""
