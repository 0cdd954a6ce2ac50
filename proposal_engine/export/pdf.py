"""HTML and PDF rendering of a generated document.

The tree is walked depth-first. Headings are styled by level and Form nodes
are rendered as bordered field lists. PDF output goes through WeasyPrint,
which is imported only when a PDF is requested.
"""

import html
from pathlib import Path
from typing import Iterable

import structlog

from proposal_engine.errors import ExportError
from proposal_engine.models.document import DocumentNode, GeneratedDocument
from proposal_engine.models.enums import BlockType

logger = structlog.get_logger(__name__)

SUBMISSION_KEYWORDS = (
    "submission", "contact", "email", "address", "phone", "fax",
    "submit", "send", "deliver", "mail", "correspondence",
)

STYLESHEET = """
@page { size: A4; margin: 20mm; }
body { font-family: Helvetica, Arial, sans-serif; color: rgb(51, 51, 51); font-size: 11pt; line-height: 1.45; }
h1 { font-size: 16pt; color: rgb(37, 99, 235); margin: 0 0 8pt; }
h2 { font-size: 14pt; color: rgb(30, 64, 175); margin: 14pt 0 6pt; }
h3 { font-size: 12pt; color: rgb(55, 48, 163); margin: 10pt 0 4pt; }
p { margin: 0 0 8pt; white-space: pre-wrap; }
.meta { font-size: 9pt; color: rgb(107, 114, 128); margin-bottom: 14pt; }
.form { border: 1px solid rgb(156, 163, 175); border-radius: 3pt; padding: 8pt 10pt; margin: 10pt 0; page-break-inside: avoid; }
.form h4 { font-size: 12pt; margin: 0 0 6pt; }
.field { margin: 3pt 0; }
.field .label { font-weight: bold; }
.field .required { color: rgb(220, 38, 38); }
.field .value { border-bottom: 1px solid rgb(209, 213, 219); min-width: 60mm; display: inline-block; }
"""

_HEADING_TAGS = {
    BlockType.HEADING1: "h1",
    BlockType.HEADING2: "h2",
    BlockType.HEADING3: "h3",
}


def _mentions_submission(node: DocumentNode) -> bool:
    text = node.text.lower()
    return any(keyword in text for keyword in SUBMISSION_KEYWORDS)


def filter_nodes(
    nodes: Iterable[DocumentNode],
    exclude_submission_info: bool = False,
    exclude_forms: bool = False,
    _is_top: bool = True,
) -> list[DocumentNode]:
    """Drop submission-detail nodes and/or Form nodes at every level.

    Root nodes are always kept; their children are filtered.
    """
    kept = []
    for node in nodes:
        if not _is_top:
            if exclude_forms and node.type == BlockType.FORM:
                continue
            if exclude_submission_info and _mentions_submission(node):
                continue
        children = filter_nodes(node.children, exclude_submission_info, exclude_forms, _is_top=False)
        kept.append(node.model_copy(update={"children": children}))
    return kept


def _render_form(node: DocumentNode) -> str:
    fields = node.metadata.form_fields if node.metadata else []
    rows = []
    for field in fields:
        required = ' <span class="required">*</span>' if field.required else ""
        rows.append(
            f'<div class="field"><span class="label">{html.escape(field.label)}{required}:</span> '
            f'<span class="value">{html.escape(field.value) or "&nbsp;"}</span></div>'
        )
    return (
        f'<div class="form" id="{html.escape(node.id)}">'
        f"<h4>{html.escape(node.text)}</h4>{''.join(rows)}</div>"
    )


def _render_node(node: DocumentNode, parts: list[str]) -> None:
    if node.type in _HEADING_TAGS:
        tag = _HEADING_TAGS[node.type]
        parts.append(f'<{tag} id="{html.escape(node.id)}">{html.escape(node.text)}</{tag}>')
    elif node.type == BlockType.FORM:
        parts.append(_render_form(node))
    else:
        parts.append(f"<p>{html.escape(node.text)}</p>")

    for child in node.children:
        _render_node(child, parts)


def render_html(
    document: GeneratedDocument,
    exclude_submission_info: bool = False,
    exclude_forms: bool = False,
) -> str:
    """Standalone HTML for ``document``."""
    nodes = filter_nodes(document.blocks, exclude_submission_info, exclude_forms)
    parts: list[str] = []
    for node in nodes:
        _render_node(node, parts)

    meta = document.metadata
    title = html.escape(f"RFQ Response - {meta.contract_id}")
    return (
        "<!DOCTYPE html>\n"
        '<html><head><meta charset="utf-8">'
        f"<title>{title}</title><style>{STYLESHEET}</style></head><body>"
        f'<div class="meta">{html.escape(meta.company_name)} | Solicitation {html.escape(meta.contract_id)} '
        f"| Version {meta.version} | {meta.last_modified:%Y-%m-%d}</div>"
        f"{''.join(parts)}</body></html>"
    )


def render_pdf(
    document: GeneratedDocument,
    output_path: str | Path,
    exclude_submission_info: bool = True,
    exclude_forms: bool = False,
) -> Path:
    """Write ``document`` as a PDF file.

    Raises:
        ExportError: If WeasyPrint is unavailable or rendering fails.
    """
    try:
        from weasyprint import HTML
    except ImportError as e:
        raise ExportError("PDF export requires WeasyPrint (install the 'pdf' extra)") from e

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    content = render_html(document, exclude_submission_info, exclude_forms)

    try:
        HTML(string=content).write_pdf(str(output_path))
    except Exception as e:
        logger.error("pdf_render_failed", path=str(output_path), error=str(e))
        raise ExportError(f"Failed to render PDF: {e}") from e

    logger.info("pdf_rendered", path=str(output_path), size_bytes=output_path.stat().st_size)
    return output_path
