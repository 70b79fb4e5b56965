"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import base64
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from resume_forge.config import load_config
from resume_forge.errors import GenerationError
from resume_forge.models.adapter import content_to_ir
from resume_forge.models.content import ResumeContent
from resume_forge.pipeline.orchestrator import GenerationRequest, build_orchestrator
from resume_forge.renderers.html import AVAILABLE_THEMES, render_html_document
from resume_forge.renderers.latex import render_latex
from resume_forge.templates.loader import default_catalog
from resume_forge.usage.limiter import UsageLimiter
from resume_forge.usage.models import Subscription
from resume_forge.usage.store import LedgerStore

app = typer.Typer(
    name="resume-forge",
    help="Generate formatted resumes from pasted text or an uploaded PDF",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def _store() -> LedgerStore:
    return LedgerStore(load_config().store.resolved_db_path)


def _load_content(path: Path) -> ResumeContent:
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1)
    return ResumeContent.model_validate(json.loads(path.read_text(encoding="utf-8")))


def _fail(exc: GenerationError) -> None:
    console.print(f"[red]{exc.message}[/red]")
    if exc.details:
        console.print(f"[dim]{exc.details}[/dim]")
    raise typer.Exit(1)


@app.command()
def generate(
    email: str = typer.Option(..., "--email", "-e", help="Email on the free-resume list"),
    text: Path = typer.Option(None, "--text", help="Resume as a plain-text file"),
    pdf: Path = typer.Option(None, "--pdf", help="Resume as a PDF file"),
    template: str = typer.Option("jake", "--template", "-t", help="Template id"),
    output: Path = typer.Option(None, "--output", "-o", help="Where to write the PDF"),
    content_json: Path = typer.Option(None, "--json", help="Also write the extracted content as JSON"),
) -> None:
    """Extract a resume with AI and compile it into a PDF."""
    for path in (text, pdf):
        if path is not None and not path.exists():
            console.print(f"[red]File not found: {path}[/red]")
            raise typer.Exit(1)
    if text is None and pdf is None:
        console.print("[red]Pass --text or --pdf[/red]")
        raise typer.Exit(1)

    config = load_config()
    orchestrator = build_orchestrator(config)
    request = GenerationRequest(
        email=email,
        template_id=template,
        resume_text=text.read_text(encoding="utf-8") if text else None,
        resume_pdf=base64.b64encode(pdf.read_bytes()).decode("ascii") if pdf else None,
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task("Generating resume...", total=None)
        try:
            result = asyncio.run(orchestrator.generate(request))
        except GenerationError as exc:
            progress.stop()
            _fail(exc)

    output = output or Path("./output") / result.filename
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.pdf_bytes)
    console.print(f"[green]PDF saved: {output}[/green]")

    if content_json is not None:
        content_json.parent.mkdir(parents=True, exist_ok=True)
        content_json.write_text(json.dumps(result.content.to_wire(), indent=2), encoding="utf-8")
        console.print(f"[green]Content saved: {content_json}[/green]")

    usage = "unlimited" if result.exempt else f"{result.usage_count}/{result.usage_limit}"
    console.print(
        Panel(
            f"Template: {result.template_id} | Model: {result.model_used} | Free usage: {usage}",
            title="Generation",
        )
    )


@app.command()
def render(
    content: Path = typer.Argument(help="Resume content JSON (camelCase, as returned by generate)"),
    template: str = typer.Option("jake", "--template", "-t", help="LaTeX template id"),
    html: bool = typer.Option(False, "--html", help="Render an HTML preview instead of LaTeX"),
    theme: str = typer.Option("jake", "--theme", help=f"HTML theme: {', '.join(AVAILABLE_THEMES)}"),
    output: Path = typer.Option(None, "--output", "-o", help="Output file"),
) -> None:
    """Render saved content to LaTeX source or an HTML preview."""
    resume = _load_content(content)
    ir = content_to_ir(resume, template)
    try:
        rendered = render_html_document(ir, theme) if html else render_latex(ir, template)
    except GenerationError as exc:
        _fail(exc)

    output = output or content.with_suffix(".html" if html else ".tex")
    output.write_text(rendered, encoding="utf-8")
    console.print(f"[green]Rendered: {output}[/green]")


@app.command()
def export(
    content: Path = typer.Argument(help="Resume content JSON"),
    template: str = typer.Option("jake", "--template", "-t", help="Template id (any, not only free)"),
    output: Path = typer.Option(None, "--output", "-o", help="Where to write the PDF"),
) -> None:
    """Compile saved content to PDF without extraction or quota."""
    resume = _load_content(content)
    orchestrator = build_orchestrator(load_config())
    try:
        result = asyncio.run(orchestrator.export(resume, template))
    except GenerationError as exc:
        _fail(exc)

    output = output or content.with_name(result.filename)
    output.write_bytes(result.pdf_bytes)
    console.print(f"[green]PDF saved: {output}[/green]")


@app.command()
def allow(
    email: str = typer.Argument(help="Email to add to the allow-list"),
    list_type: str = typer.Option(None, "--list", help="Submission type (defaults to the free-resume list)"),
) -> None:
    """Add an email to the free-resume allow-list."""
    config = load_config()
    email = email.strip().lower()
    _store().add_to_list(email, list_type or config.limits.allow_list_type)
    console.print(f"[green]Allowed: {email}[/green]")


@app.command()
def plan(
    email: str = typer.Argument(help="Subscriber email"),
    plan_id: str = typer.Argument(help="Plan id, e.g. plus, pro-annual"),
    status: str = typer.Option("active", "--status", help="Subscription status"),
) -> None:
    """Set an identity's plan (local stand-in for the billing system)."""
    email = email.strip().lower()
    _store().upsert_subscription(Subscription(email=email, plan_id=plan_id, status=status))
    console.print(f"[green]{email}: {plan_id} ({status})[/green]")


@app.command()
def usage(email: str = typer.Argument(help="Email to inspect")) -> None:
    """Show an email's free-tier standing and generation history."""
    config = load_config()
    store = _store()
    email = email.strip().lower()
    limiter = UsageLimiter(store, config.limits)

    async def _check():
        return await limiter.is_allowed(email), await limiter.check_limit(email)

    allowed, check = asyncio.run(_check())
    limit = "unlimited" if check.exempt else str(check.limit)
    console.print(
        Panel(
            f"Allow-listed: {'yes' if allowed else 'no'} | Used: {check.count} | Limit: {limit} | "
            f"Can generate: {'yes' if check.can_generate else 'no'}",
            title=email,
        )
    )

    records = store.list_records(email)
    if not records:
        console.print("[dim]No generations recorded.[/dim]")
        return
    table = Table(title="Generations")
    table.add_column("When")
    table.add_column("Input")
    table.add_column("Size", justify="right")
    table.add_column("Template")
    for r in records:
        size = f"{r.pdf_size_bytes} B" if r.input_type == "pdf" else f"{r.text_character_count} chars"
        table.add_row(r.created_at.strftime("%Y-%m-%d %H:%M"), r.input_type, size, r.template_id)
    console.print(table)


@app.command()
def stats() -> None:
    """Show ledger-wide generation statistics."""
    s = _store().get_stats()
    table = Table(title="Free resume generations")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Total", str(s.total_generations))
    table.add_row("From text", str(s.text_count))
    table.add_row("From PDF", str(s.pdf_count))
    table.add_row("Text characters", f"{s.total_text_characters:,}")
    table.add_row("PDF bytes", f"{s.total_pdf_bytes:,}")
    table.add_row("Last 7 days", str(s.last_7_days))
    table.add_row("Last 30 days", str(s.last_30_days))
    if s.first_generation_at:
        table.add_row("First", s.first_generation_at.strftime("%Y-%m-%d %H:%M"))
        table.add_row("Latest", s.last_generation_at.strftime("%Y-%m-%d %H:%M"))
    console.print(table)


@app.command()
def templates() -> None:
    """List available templates."""
    catalog = default_catalog()
    table = Table(title="Templates")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Free")
    table.add_column("Required sections")
    for t in catalog.templates:
        table.add_row(t.id, t.name, "yes" if t.free else "", ", ".join(t.required_sections))
    console.print(table)
    if catalog.aliases:
        console.print(
            "[dim]Aliases: " + ", ".join(f"{k} -> {v}" for k, v in catalog.aliases.items()) + "[/dim]"
        )


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8000, "--port"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    from resume_forge.api import create_app

    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    app()
