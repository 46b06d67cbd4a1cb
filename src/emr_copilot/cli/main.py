"""CLI for emr-copilot: extract / assist / insert / options commands."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from emr_copilot.core.config import AppSettings, ObservabilityConfig
from emr_copilot.exceptions import CopilotError
from emr_copilot.extraction.document import PageDocument
from emr_copilot.extraction.extractor import ContentExtractor
from emr_copilot.formatters.text_formatter import TextFormatter
from emr_copilot.generation.client import GenerationClient
from emr_copilot.hooks import setup_logging
from emr_copilot.messaging import CommandDispatcher
from emr_copilot.models import InsertionPayload
from emr_copilot.persistence.options_store import create_options_store
from emr_copilot.services.assistant_service import AssistantService
from emr_copilot.session import SessionContext

app = typer.Typer(name="emr-copilot", help="Extract, draft and insert clinical documentation for OpenEMR pages")
console = Console()


def _build_settings(model: Optional[str], verbose: bool) -> AppSettings:
    """Build settings, overriding env defaults with CLI flags."""
    settings = AppSettings()
    if model:
        settings.llm.model = model
    settings.observability = ObservabilityConfig(log_level="DEBUG" if verbose else "WARNING")
    setup_logging(settings.observability)
    return settings


def _load_documents(page_files: list[Path], urls: Optional[list[str]]) -> list[PageDocument]:
    """First file is the top-level page; the rest are embedded frames."""
    urls = urls or []
    if len(urls) > len(page_files):
        raise typer.BadParameter("More --url values than page files")
    return [
        PageDocument.from_file(path, url=urls[i] if i < len(urls) else "", is_top_level=i == 0)
        for i, path in enumerate(page_files)
    ]


@app.command()
def extract(
    page_files: list[Path] = typer.Argument(..., help="HTML files: top-level page, then frames"),
    url: Optional[list[str]] = typer.Option(None, "--url", help="Page URL, once per file in order"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Print the bounded corpus and metadata extracted from the pages."""
    settings = _build_settings(None, verbose)
    documents = _load_documents(page_files, url)
    store = create_options_store(settings.options)
    service = AssistantService(
        GenerationClient(settings, options_store=store),
        store,
        extractor=ContentExtractor(settings.extraction),
    )
    result = service.extract(documents)

    table = Table(title="Page Metadata")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Patient ID", result.metadata.patient_id or "-")
    table.add_row("Encounter", result.metadata.encounter_id or "-")
    table.add_row("URL", result.metadata.source_url or "-")
    table.add_row("Corpus chars", str(len(result.text)))
    console.print(table)
    console.print(result.text, markup=False)


@app.command()
def assist(
    message: str = typer.Argument(..., help='User request, e.g. "draft soap note"'),
    page_files: list[Path] = typer.Argument(..., help="HTML files: top-level page, then frames"),
    url: Optional[list[str]] = typer.Option(None, "--url", help="Page URL, once per file in order"),
    save_result: Optional[Path] = typer.Option(None, help="Write the insertable result JSON here"),
    model: Optional[str] = typer.Option(None, "--model", help="LiteLLM model identifier"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Run one assistant turn against the pages."""
    settings = _build_settings(model, verbose)
    documents = _load_documents(page_files, url)
    store = create_options_store(settings.options)
    service = AssistantService(
        GenerationClient(settings, options_store=store),
        store,
        extractor=ContentExtractor(settings.extraction),
    )
    session = SessionContext()

    reply = asyncio.run(service.handle_turn(session, message, documents))

    style = "green" if reply.ok else "red"
    console.print(f"[bold {style}]{reply.intent.value}[/bold {style}]")
    console.print(reply.message, markup=False)

    links = TextFormatter.navigation_links(session.current_metadata)
    if reply.ok and links:
        console.print("\n[bold]Links:[/bold]")
        for name, link in links.items():
            console.print(f"  {name}: {link}", markup=False)

    if save_result and reply.insertable is not None:
        save_result.write_text(reply.insertable.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        console.print(f"[green]Result saved to {save_result}[/green]")

    if not reply.ok:
        raise typer.Exit(code=1)


@app.command()
def insert(
    payload_file: Path = typer.Argument(..., help="InsertionPayload JSON (icdCodes / cptCodes / soap)"),
    page_files: list[Path] = typer.Argument(..., help="HTML files: top-level page, then frames"),
    url: Optional[list[str]] = typer.Option(None, "--url", help="Page URL, once per file in order"),
    in_place: bool = typer.Option(False, "--in-place", help="Overwrite the page files with the result"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Insert a saved result into the pages."""
    _build_settings(None, verbose)
    documents = _load_documents(page_files, url)
    payload = InsertionPayload.model_validate_json(payload_file.read_text(encoding="utf-8"))

    dispatcher = CommandDispatcher()
    result = dispatcher.insert_data(payload, documents)

    table = Table(title="Insertion")
    table.add_column("Page", style="cyan")
    table.add_column("Success")
    table.add_column("Fields")
    table.add_column("Rows added")
    table.add_column("Rows skipped")
    table.add_column("Error", max_width=50)
    for path, outcome in zip(page_files, dispatcher.last_outcomes):
        table.add_row(
            path.name,
            "yes" if outcome.success else "no",
            ", ".join(outcome.fields_written) or "-",
            str(outcome.rows_added),
            str(outcome.rows_skipped),
            outcome.error or "",
        )
    console.print(table)

    if in_place:
        for path, doc in zip(page_files, documents):
            path.write_text(doc.render(), encoding="utf-8")
        console.print(f"[green]Updated {len(page_files)} page file(s)[/green]")

    if not result["success"]:
        console.print(f"[red]{result.get('error', 'Insertion failed')}[/red]")
        raise typer.Exit(code=1)


@app.command()
def options(
    set_: Optional[list[str]] = typer.Option(None, "--set", help="key=value, e.g. icd10=false"),
) -> None:
    """Show or update the persisted options."""
    settings = AppSettings()
    store = create_options_store(settings.options)

    if set_:
        # raw strings; the options model coerces each by its field type
        changes: dict[str, str] = {}
        for item in set_:
            key, sep, value = item.partition("=")
            if not sep:
                raise typer.BadParameter(f"Expected key=value, got {item!r}")
            changes[key.strip()] = value.strip()
        try:
            store.update(**changes)
        except (ValueError, CopilotError) as exc:
            console.print(f"[red]Invalid options: {exc}[/red]")
            raise typer.Exit(code=1) from exc

    console.print_json(json.dumps(store.load().redacted()))


if __name__ == "__main__":
    app()
