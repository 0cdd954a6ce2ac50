"""Document enrichment: fetch, find forms, pre-fill from entity data.

Failures are per document. A document that cannot be fetched, read or
analysed is logged and omitted; enrichment as a whole never raises for it.
"""

import asyncio
from typing import Optional, Sequence

import structlog

from proposal_engine.config.settings import Settings, get_settings
from proposal_engine.enrichment.fetcher import DocumentFetcher
from proposal_engine.enrichment.form_analyzer import analyze_document_for_forms
from proposal_engine.enrichment.form_mapper import map_entity_to_form
from proposal_engine.errors import EnrichmentError
from proposal_engine.llm.structured import StructuredCaller
from proposal_engine.models.enrichment import (
    DocumentFetchResult,
    DocumentInfo,
    EnrichmentResult,
    PreFilledFormDescriptor,
)
from proposal_engine.models.records import EntityRecord

logger = structlog.get_logger(__name__)


def _display_name(document: DocumentInfo, taken: dict[str, str]) -> str:
    """The filename, qualified by document id when another document already uses it."""
    if document.filename not in taken:
        return document.filename
    return f"{document.filename} ({document.id})"


class DocumentEnricher:
    """Runs the enrichment sub-pipeline for one entity."""

    def __init__(
        self,
        caller: StructuredCaller,
        fetcher: Optional[DocumentFetcher] = None,
        settings: Optional[Settings] = None,
    ):
        self.caller = caller
        self.settings = settings or get_settings()
        self.fetcher = fetcher or DocumentFetcher(self.settings)

    async def enrich(
        self, documents: Sequence[DocumentInfo], entity: EntityRecord
    ) -> EnrichmentResult:
        fetched = await self.fetcher.fetch_documents(documents)
        # Model calls block; keep them off the event loop
        return await asyncio.to_thread(self._process, documents, fetched, entity)

    def enrich_sync(
        self, documents: Sequence[DocumentInfo], entity: EntityRecord
    ) -> EnrichmentResult:
        """Blocking variant for callers without a running event loop."""
        fetched = asyncio.run(self.fetcher.fetch_documents(documents))
        return self._process(documents, fetched, entity)

    def _process(
        self,
        documents: Sequence[DocumentInfo],
        fetched: dict[str, DocumentFetchResult],
        entity: EntityRecord,
    ) -> EnrichmentResult:
        limit = self.settings.document_content_char_limit
        processed: list[str] = []
        excerpts: dict[str, str] = {}
        forms: list[PreFilledFormDescriptor] = []
        failures: dict[str, str] = {}

        for document in documents:
            result = fetched.get(document.id)
            if result is None or not result.success:
                reason = result.error if result else "Document was not fetched"
                failures[document.id] = reason or "Unknown error"
                logger.warning("document_omitted", document=document.filename, reason=reason)
                continue

            text = (result.content or "")[:limit]
            name = _display_name(document, excerpts)
            processed.append(name)
            excerpts[name] = text

            try:
                analysis = analyze_document_for_forms(self.caller, document, text)
                if not analysis.analysis_success or not analysis.extracted_fields:
                    logger.info("document_has_no_forms", document=document.filename)
                    continue
                forms.append(map_entity_to_form(self.caller, entity, analysis))
            except EnrichmentError as e:
                failures[document.id] = str(e)
                logger.warning("document_analysis_omitted", document=document.filename, error=str(e))

        logger.info(
            "enrichment_summary",
            documents=len(documents),
            processed=len(processed),
            forms=len(forms),
            omitted=len(failures),
        )
        return EnrichmentResult(
            documents_processed=processed,
            document_excerpts=excerpts,
            forms=forms,
            failures=failures,
        )


def analyze_and_map(
    documents: Sequence[DocumentInfo],
    entity: EntityRecord,
    caller: StructuredCaller,
    fetcher: Optional[DocumentFetcher] = None,
) -> list[PreFilledFormDescriptor]:
    """Pre-filled form descriptors for every document that yielded a form."""
    return DocumentEnricher(caller, fetcher=fetcher).enrich_sync(documents, entity).forms
