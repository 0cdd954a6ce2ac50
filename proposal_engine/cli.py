"""Command-line interface for the RFQ proposal engine."""

import json
import sys
from pathlib import Path
from typing import Optional

import typer
from pydantic import TypeAdapter
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table

from proposal_engine.config.settings import get_settings
from proposal_engine.logging_config import configure_logging
from proposal_engine.models.document import GeneratedDocument
from proposal_engine.models.enrichment import DocumentInfo
from proposal_engine.models.enums import StageStatus
from proposal_engine.models.records import load_contract, load_entity
from proposal_engine.pipeline.progress import ProgressSnapshot, ProgressTracker

app = typer.Typer(
    name="proposal-engine",
    help="RFQ Proposal Engine - Generate editable government-contract proposal drafts",
    add_completion=False,
)
console = Console()

_STATUS_STYLE = {
    StageStatus.PENDING: "[dim]pending[/dim]",
    StageStatus.IN_PROGRESS: "[yellow]working[/yellow]",
    StageStatus.DONE: "[green]done[/green]",
    StageStatus.FAILED: "[red]failed[/red]",
}


def _progress_table(snapshot: ProgressSnapshot) -> Table:
    table = Table(title=f"Progress {snapshot.overall:.0%}", show_lines=False)
    table.add_column("Stage")
    table.add_column("Status")
    table.add_column("Message", overflow="fold")
    for entry in snapshot.entries:
        table.add_row(
            entry.stage.value.replace("_", " ").title(),
            _STATUS_STYLE[entry.status],
            entry.message,
        )
    return table


def _load_document(path: Path) -> GeneratedDocument:
    with open(path, "r", encoding="utf-8") as f:
        return GeneratedDocument.model_validate(json.load(f))


@app.command()
def generate(
    contract_path: Path = typer.Argument(
        ..., help="Contract (RFQ) record as JSON", exists=True, dir_okay=False, readable=True
    ),
    entity_path: Path = typer.Argument(
        ..., help="Entity (company) record as JSON", exists=True, dir_okay=False, readable=True
    ),
    documents: Optional[Path] = typer.Option(
        None,
        "--documents",
        "-d",
        help="JSON list of solicitation documents ({id, url, filename, fileType}) to enrich from",
        exists=True,
        dir_okay=False,
    ),
    output: Path = typer.Option(
        Path("proposal.json"),
        "--output",
        "-o",
        help="Where to write the generated document",
    ),
    session_log_dir: Optional[Path] = typer.Option(
        None,
        "--session-log-dir",
        help="Write per-stage diagnostic JSON files here (default: SESSION_LOG_DIR)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Run the generation pipeline for a contract and an entity."""
    from proposal_engine.llm.structured import LangChainStructuredCaller
    from proposal_engine.pipeline import (
        CompositeObserver,
        PipelineCompleted,
        ProposalPipeline,
        SessionRecorder,
        StructlogObserver,
        generate_run_id,
    )

    settings = get_settings()
    configure_logging("DEBUG" if verbose else "WARNING", json_output=settings.log_json)

    console.print(
        Panel.fit(
            "[bold blue]RFQ Proposal Engine[/bold blue]\n"
            "Generating proposal draft...",
            border_style="blue",
        )
    )

    try:
        contract = load_contract(contract_path)
        entity = load_entity(entity_path)
        document_list = []
        if documents is not None:
            with open(documents, "r", encoding="utf-8") as f:
                document_list = TypeAdapter(list[DocumentInfo]).validate_python(json.load(f))
    except (OSError, ValueError) as e:
        console.print(f"[red]Error loading input:[/red] {e}")
        sys.exit(1)

    console.print(f"[dim]Contract:[/dim] {contract.title} ({contract.reference_number})")
    console.print(f"[dim]Entity:[/dim] {entity.business_name}")
    if document_list:
        console.print(f"[dim]Documents:[/dim] {len(document_list)}")
    console.print()

    run_id = generate_run_id()
    observer = StructlogObserver(run_id)
    log_dir = session_log_dir or settings.session_log_dir
    recorder = None
    if log_dir:
        recorder = SessionRecorder(log_dir)
        observer = CompositeObserver(observer, recorder)

    tracker = ProgressTracker()
    pipeline = ProposalPipeline(
        contract,
        entity,
        LangChainStructuredCaller(),
        documents=document_list,
        observer=observer,
        tracker=tracker,
        run_id=run_id,
    )

    with Live(_progress_table(tracker.snapshot), console=console, refresh_per_second=4) as live:
        unsubscribe = tracker.subscribe(lambda snapshot: live.update(_progress_table(snapshot)))
        try:
            result = pipeline.run()
        finally:
            unsubscribe()

    if not isinstance(result, PipelineCompleted):
        console.print(f"\n[red]Generation failed at {result.stage.value}:[/red] {result.reason}")
        if recorder is not None:
            console.print(f"[dim]Session logs:[/dim] {recorder.log_dir} ({recorder.session_id})")
        sys.exit(1)

    document = result.document
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        f.write(document.model_dump_json(indent=2))

    _display_summary(document, result.duration_seconds)
    console.print(f"\n[green]Document saved to:[/green] {output}")
    if recorder is not None:
        console.print(f"[dim]Session logs:[/dim] {recorder.log_dir} ({recorder.session_id})")


@app.command("export-pdf")
def export_pdf(
    document_path: Path = typer.Argument(..., help="Generated document JSON", exists=True, dir_okay=False),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file"),
    as_html: bool = typer.Option(False, "--html", help="Write HTML instead of PDF"),
    include_submission_info: bool = typer.Option(
        False, "--include-submission-info", help="Keep blocks with submission/contact details"
    ),
    exclude_forms: bool = typer.Option(False, "--exclude-forms", help="Leave embedded forms out"),
) -> None:
    """Render a generated document as PDF (or HTML)."""
    from proposal_engine.errors import ExportError
    from proposal_engine.export.pdf import render_html, render_pdf

    document = _load_document(document_path)
    suffix = ".html" if as_html else ".pdf"
    output = output or document_path.with_suffix(suffix)

    try:
        if as_html:
            output.write_text(
                render_html(document, not include_submission_info, exclude_forms),
                encoding="utf-8",
            )
        else:
            render_pdf(document, output, not include_submission_info, exclude_forms)
    except ExportError as e:
        console.print(f"[red]Export failed:[/red] {e}")
        sys.exit(1)

    console.print(f"[green]Exported to:[/green] {output}")


@app.command()
def email(
    document_path: Path = typer.Argument(..., help="Generated document JSON", exists=True, dir_okay=False),
    to: list[str] = typer.Option([], "--to", help="Submission email address (repeatable)"),
    cc: Optional[str] = typer.Option(None, "--cc", help="Secondary contact email"),
    contact_name: Optional[str] = typer.Option(None, "--contact-name", help="Contracting officer name"),
) -> None:
    """Print the submission email and its mailto: link."""
    from proposal_engine.export.email import Contact, ContactInfo, build_email_template, mailto_link

    document = _load_document(document_path)
    contact = ContactInfo(
        submission_email=to,
        primary_contact=Contact(name=contact_name) if contact_name else None,
        secondary_contact=Contact(email=cc) if cc else None,
    )
    template = build_email_template(document, contact)

    table = Table(show_header=False, box=None)
    table.add_column("Field", style="dim")
    table.add_column("Value")
    table.add_row("To", ", ".join(template.to) or "-")
    table.add_row("Cc", ", ".join(template.cc) or "-")
    table.add_row("Subject", template.subject)
    table.add_row("Attachments", ", ".join(template.attachments) or "-")
    console.print(table)
    console.print(Panel(template.body, title="Body", border_style="blue"))
    console.print(f"\n[dim]mailto:[/dim] {mailto_link(template)}")


@app.command()
def info() -> None:
    """Display system information and configuration."""
    from proposal_engine import __version__

    settings = get_settings()

    console.print(Panel.fit("[bold blue]RFQ Proposal Engine[/bold blue]", border_style="blue"))

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="dim")
    table.add_column("Value")

    table.add_row("Version", __version__)
    table.add_row("LLM Model", settings.llm_model_name)
    table.add_row("Ollama URL", settings.llm_ollama_base_url)
    table.add_row("Temperature", str(settings.llm_temperature))
    table.add_row("Context Window", str(settings.llm_num_ctx))
    table.add_row("Allowed Document Hosts", ", ".join(settings.document_allowed_hosts))
    table.add_row("Max Document Size", f"{settings.document_max_bytes // (1024 * 1024)} MB")
    table.add_row("Fetch Concurrency", str(settings.document_fetch_concurrency))
    table.add_row("Session Log Dir", settings.session_log_dir or "(disabled)")

    console.print(table)


def _display_summary(document: GeneratedDocument, duration: float) -> None:
    from proposal_engine.document.editing import count_nodes, iter_nodes
    from proposal_engine.models.enums import BlockType

    console.print("\n[bold]Generation Summary[/bold]")
    console.print("-" * 40)

    forms = sum(1 for n in iter_nodes(document.blocks) if n.type == BlockType.FORM)
    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Value", justify="right")
    table.add_row("Solicitation", document.metadata.contract_id)
    table.add_row("Company", document.metadata.company_name)
    table.add_row("Blocks", str(count_nodes(document.blocks)))
    table.add_row("Forms", str(forms))
    table.add_row("Confidence", f"{document.confidence_score:g}%")
    table.add_row("Submission Ready", "yes" if document.submission_ready else "no")
    console.print(table)

    for warning in document.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")

    console.print(f"\n[dim]Generated in {duration:.1f}s[/dim]")


if __name__ == "__main__":
    app()
