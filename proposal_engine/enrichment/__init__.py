"""Optional solicitation document enrichment."""

from .fetcher import DocumentFetcher, is_allowed_url
from .form_analyzer import analyze_document_for_forms
from .form_mapper import build_prefilled_form, map_entity_to_form, map_field_type
from .pdf_text import PDFExtractionError, extract_pdf_text
from .service import DocumentEnricher, analyze_and_map

__all__ = [
    "DocumentFetcher",
    "is_allowed_url",
    "analyze_document_for_forms",
    "build_prefilled_form",
    "map_entity_to_form",
    "map_field_type",
    "PDFExtractionError",
    "extract_pdf_text",
    "DocumentEnricher",
    "analyze_and_map",
]
