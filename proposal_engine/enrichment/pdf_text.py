"""PDF text extraction using pdfplumber."""

import io

import pdfplumber
import structlog

from proposal_engine.errors import EnrichmentError

logger = structlog.get_logger(__name__)


class PDFExtractionError(EnrichmentError):
    """Error during PDF extraction."""


def extract_pdf_text(data: bytes, source: str = "document") -> tuple[str, int]:
    """Extract text from in-memory PDF bytes.

    Args:
        data: Raw PDF content.
        source: Name used in logs and errors.

    Returns:
        Tuple of (text with pages separated by blank lines, page count).

    Raises:
        PDFExtractionError: If the bytes cannot be read as a PDF.
    """
    pages: list[str] = []
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            for page_num, page in enumerate(pdf.pages, start=1):
                text = _clean_page_text(page.extract_text() or "")
                pages.append(text)
                logger.debug("page_extracted", source=source, page=page_num, chars=len(text))
    except Exception as e:
        logger.error("pdf_extraction_failed", source=source, error=str(e))
        raise PDFExtractionError(f"Failed to extract PDF {source}: {e}") from e

    full_text = "\n\n".join(p for p in pages if p)
    logger.info("pdf_extraction_complete", source=source, pages=len(pages), total_chars=len(full_text))
    return full_text, len(pages)


def _clean_page_text(text: str) -> str:
    """Collapse repeated spaces and blank lines, keeping paragraph breaks."""
    if not text:
        return ""

    lines = []
    for line in text.split("\n"):
        line = line.rstrip()
        while "  " in line:
            line = line.replace("  ", " ")
        lines.append(line)

    result = "\n".join(lines)
    while "\n\n\n" in result:
        result = result.replace("\n\n\n", "\n\n")

    return result.strip()
