"""Proposal pipeline orchestrator.

Runs the four generation stages strictly in sequence, then assembles the
document:

    DATA_EXTRACTION -> INSIGHT_ANALYSIS -> STRATEGY_SYNTHESIS
        -> DOCUMENT_WRITING -> ASSEMBLY

Each stage receives the concrete outputs of the stages before it. The first
failure halts the run: that stage is marked failed, later stages stay
pending and are never invoked, and outputs produced so far remain on
``pipeline.outputs``.
"""

import time
import uuid
from typing import Optional, Sequence

import structlog
from pydantic import BaseModel

from proposal_engine.enrichment.service import DocumentEnricher
from proposal_engine.errors import AssemblyError, PipelineCancelled, StageCallError
from proposal_engine.llm.structured import StructuredCaller
from proposal_engine.models.document import GeneratedDocument, StageOutputs
from proposal_engine.models.enrichment import DocumentInfo, EnrichmentResult
from proposal_engine.models.enums import StageName, StageStatus
from proposal_engine.models.records import ContractRecord, EntityRecord
from proposal_engine.pipeline.assembly import assemble_document
from proposal_engine.pipeline.observers import RunObserver, StructlogObserver
from proposal_engine.pipeline.progress import ProgressTracker
from proposal_engine.pipeline.results import (
    PipelineCompleted,
    PipelineFailed,
    PipelineResult,
    StageFailure,
)
from proposal_engine.pipeline.stages import (
    DataExtractionInput,
    DataExtractionStage,
    DocumentWritingInput,
    DocumentWritingStage,
    InsightAnalysisInput,
    InsightAnalysisStage,
    StageExecutor,
    StrategySynthesisInput,
    StrategySynthesisStage,
)

logger = structlog.get_logger(__name__)

ASSEMBLY_START_MESSAGE = "Assembling document tree..."


def generate_run_id() -> str:
    return str(uuid.uuid4())[:12]


class ProposalPipeline:
    """One generation run for a contract/entity pair.

    Args:
        contract: Solicitation being answered.
        entity: Company submitting the response.
        caller: Structured model caller shared by all stages.
        documents: Optional solicitation documents to enrich from.
        enricher: Enrichment service; a default one using ``caller`` is
            created when documents are given without it.
        observer: Receives stage events; defaults to structlog output.
        tracker: Progress tracker; a fresh one is created if omitted.
        run_id: Identifier bound into logs and results.
    """

    def __init__(
        self,
        contract: ContractRecord,
        entity: EntityRecord,
        caller: StructuredCaller,
        *,
        documents: Optional[Sequence[DocumentInfo]] = None,
        enricher: Optional[DocumentEnricher] = None,
        observer: Optional[RunObserver] = None,
        tracker: Optional[ProgressTracker] = None,
        run_id: Optional[str] = None,
    ):
        self.contract = contract
        self.entity = entity
        self.caller = caller
        self.documents = list(documents or [])
        self.enricher = enricher
        self.run_id = run_id or generate_run_id()
        self.observer = observer or StructlogObserver(self.run_id)
        self.tracker = tracker or ProgressTracker()
        self.enrichment = EnrichmentResult()

        self._outputs = StageOutputs()
        self._cancelled = False
        self._started = False
        self._failure: Optional[StageFailure] = None
        self._log = logger.bind(run_id=self.run_id)

    @property
    def outputs(self) -> StageOutputs:
        """Stage outputs produced so far, also after a failure."""
        return self._outputs

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Request cancellation; honoured at the next stage boundary."""
        self._cancelled = True
        self._log.info("pipeline_cancel_requested")

    def run(self) -> PipelineResult:
        """Execute the run once and return its terminal state."""
        if self._started:
            raise RuntimeError(f"Pipeline run {self.run_id} has already been executed")
        self._started = True

        start = time.perf_counter()
        self._log.info(
            "pipeline_start",
            contract=self.contract.reference_number,
            entity=self.entity.business_name,
            documents=len(self.documents),
        )

        self.enrichment = self._enrich()

        data_analysis = self._run_stage(
            DataExtractionStage(self.caller, self.observer),
            DataExtractionInput(self.contract, self.entity, self.enrichment),
            next_stage=InsightAnalysisStage,
        )
        if data_analysis is None:
            return self._failed(start)
        self._outputs = self._outputs.model_copy(update={"data_analysis": data_analysis})

        analysis = self._run_stage(
            InsightAnalysisStage(self.caller, self.observer),
            InsightAnalysisInput(data_analysis),
            next_stage=StrategySynthesisStage,
        )
        if analysis is None:
            return self._failed(start)
        self._outputs = self._outputs.model_copy(update={"analysis": analysis})

        strategy = self._run_stage(
            StrategySynthesisStage(self.caller, self.observer),
            StrategySynthesisInput(data_analysis, analysis),
            next_stage=DocumentWritingStage,
        )
        if strategy is None:
            return self._failed(start)
        self._outputs = self._outputs.model_copy(update={"strategy": strategy})

        proposal = self._run_stage(
            DocumentWritingStage(self.caller, self.observer),
            DocumentWritingInput(
                data_analysis=data_analysis,
                analysis=analysis,
                strategy=strategy,
                contract=self.contract,
                entity=self.entity,
                prefilled_forms=tuple(self.enrichment.forms),
            ),
            next_stage=None,
        )
        if proposal is None:
            return self._failed(start)
        self._outputs = self._outputs.model_copy(update={"proposal": proposal})

        document = self._run_assembly()
        if document is None:
            return self._failed(start)

        duration = time.perf_counter() - start
        self.observer.run_finished(
            True,
            {
                "duration_seconds": round(duration, 2),
                "blocks": len(proposal.response_blocks),
                "confidence_score": document.confidence_score,
                "warnings": len(document.warnings),
            },
        )
        return PipelineCompleted(
            run_id=self.run_id,
            document=document,
            outputs=self._outputs,
            progress=self.tracker.snapshot,
            duration_seconds=duration,
        )

    def run_or_raise(self) -> GeneratedDocument:
        """Run and return the document, raising a PipelineError on failure."""
        result = self.run()
        if isinstance(result, PipelineCompleted):
            return result.document
        if result.error_type == AssemblyError.__name__:
            raise AssemblyError(result.reason)
        if result.error_type == PipelineCancelled.__name__:
            raise PipelineCancelled(result.reason, stage=result.stage)
        raise StageCallError(result.reason, stage=result.stage)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _enrich(self) -> EnrichmentResult:
        if not self.documents:
            return EnrichmentResult()

        if self.enricher is None:
            self.enricher = DocumentEnricher(self.caller)

        self._log.info("enrichment_start", documents=len(self.documents))
        try:
            result = self.enricher.enrich_sync(self.documents, self.entity)
        except Exception as e:
            # Enrichment only adds context; the run continues without it
            self._log.warning("enrichment_failed", error=str(e), error_type=type(e).__name__)
            reason = f"Enrichment failed: {type(e).__name__}: {e}"
            return EnrichmentResult(failures={d.id: reason for d in self.documents})

        self._log.info(
            "enrichment_complete",
            documents_processed=len(result.documents_processed),
            forms=len(result.forms),
            omitted=len(result.failures),
        )
        return result

    def _check_cancelled(self, stage: StageName) -> Optional[StageFailure]:
        if not self._cancelled:
            return None
        return StageFailure(
            stage=stage,
            error="Run cancelled before stage started",
            error_type=PipelineCancelled.__name__,
            duration_seconds=0.0,
        )

    def _run_stage(
        self,
        executor: StageExecutor,
        inputs,
        next_stage: Optional[type[StageExecutor]],
    ) -> Optional[BaseModel]:
        stage = executor.stage
        if self.tracker.snapshot.get(stage).status == StageStatus.PENDING:
            self.tracker.start(stage, executor.start_message)

        cancelled = self._check_cancelled(stage)
        if cancelled is not None:
            self._record_failure(cancelled)
            return None

        result = executor.execute(inputs)
        if isinstance(result, StageFailure):
            self._record_failure(result)
            return None

        self.tracker.complete(stage, executor.summarize(result.output), result.digest)
        if next_stage is not None:
            self.tracker.start(next_stage.stage, next_stage.start_message)
        else:
            self.tracker.start(StageName.ASSEMBLY, ASSEMBLY_START_MESSAGE)
        return result.output

    def _run_assembly(self) -> Optional[GeneratedDocument]:
        stage = StageName.ASSEMBLY
        cancelled = self._check_cancelled(stage)
        if cancelled is not None:
            self._record_failure(cancelled)
            return None

        self.observer.stage_started(stage)
        start = time.perf_counter()
        try:
            document = assemble_document(self.contract, self.entity, self._outputs)
        except AssemblyError as e:
            duration = time.perf_counter() - start
            self.observer.stage_failed(stage, str(e), type(e).__name__, duration)
            self._record_failure(StageFailure(
                stage=stage,
                error=str(e),
                error_type=type(e).__name__,
                duration_seconds=duration,
            ))
            return None

        duration = time.perf_counter() - start
        digest = {
            "root_children": len(document.blocks[0].children),
            "warnings": len(document.warnings),
        }
        self.observer.stage_succeeded(stage, document, duration, digest)
        self.tracker.complete(
            stage,
            f"Document assembled - {len(self._outputs.proposal.response_blocks)} blocks, "
            f"{document.confidence_score:g}% confidence",
            digest,
        )
        return document

    def _record_failure(self, failure: StageFailure) -> None:
        self._failure = failure
        self.tracker.fail(failure.stage, f"Failed: {failure.error}")

    def _failed(self, start: float) -> PipelineFailed:
        failure = self._failure
        duration = time.perf_counter() - start
        self.observer.run_finished(
            False,
            {
                "stage": failure.stage.value,
                "error": failure.error,
                "error_type": failure.error_type,
                "duration_seconds": round(duration, 2),
            },
        )
        return PipelineFailed(
            run_id=self.run_id,
            stage=failure.stage,
            reason=failure.error,
            error_type=failure.error_type,
            outputs=self._outputs,
            progress=self.tracker.snapshot,
            duration_seconds=duration,
        )
