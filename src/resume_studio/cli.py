"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
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

from resume_studio.cache.materials_cache import MaterialsCache
from resume_studio.clients.llm_client import LLMClient
from resume_studio.config import AppConfig, load_config
from resume_studio.exceptions import ResumeStudioError
from resume_studio.models.enhanced import BulletState
from resume_studio.models.user import UserSettings
from resume_studio.parsers.job_loader import load_job_posting
from resume_studio.parsers.resume_parser import parse_resume
from resume_studio.pipeline.orchestrator import TailoringPipeline, job_key
from resume_studio.scoring.match_scorer import score_match

app = typer.Typer(
    name="resume-studio",
    help="Tailor a resume to a job posting while keeping its original design",
    no_args_is_help=True,
)
console = Console()

_STATE_STYLE = {
    BulletState.UNCHANGED: "dim",
    BulletState.ENHANCED_PENDING_WRITE: "yellow",
    BulletState.ENHANCED_WRITTEN: "green",
    BulletState.ENHANCED_NOT_WRITTEN: "red",
}


def _setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
            force=True,
        )


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def _require_file(path: Path, what: str) -> None:
    if not path.exists():
        _fail(f"{what} not found: {path}")


def _open_cache(config: AppConfig) -> MaterialsCache:
    return MaterialsCache(
        db_path=config.cache.resolved_db_path,
        ttl_days=config.cache.ttl_days,
    )


@app.command()
def parse(
    resume: Path = typer.Argument(help="Resume file (PDF/DOCX/TXT/MD)"),
    as_json: bool = typer.Option(False, "--json", help="Dump the extracted model as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Extract a resume and show what was found."""
    _setup_logging(verbose)
    _require_file(resume, "Resume file")
    try:
        structured = parse_resume(resume)
    except ResumeStudioError as e:
        _fail(f"Could not read resume: {e}")

    if as_json:
        console.print_json(structured.model_dump_json(exclude={"source_bytes"}))
        return

    table = Table(title=f"{resume.name} ({structured.source_format.value})")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    contact = structured.contact
    table.add_row("Email", contact.email or "-")
    table.add_row("Phone", contact.phone or "-")
    table.add_row("LinkedIn", contact.linkedin or "-")
    table.add_row("Current title", structured.current_title or "-")
    years = structured.years_of_experience
    table.add_row("Years of experience", f"{years:g}" if years is not None else "-")
    table.add_row("Sections", ", ".join(s.title or s.kind.value for s in structured.sections))
    table.add_row("Skills", ", ".join(structured.skills[:20]) or "-")
    table.add_row("Education", str(len(structured.education_entries)))
    console.print(table)

    for exp in structured.work_experiences:
        heading = " | ".join(p for p in (exp.title, exp.company) if p) or "(untitled entry)"
        dates = f"{exp.start_date or '?'} - {exp.end_date or 'Present'}"
        console.print(f"\n[bold]{heading}[/bold] [dim]{dates}[/dim]")
        for bullet in exp.bullet_points:
            console.print(f"  • {bullet}")


@app.command()
def score(
    resume: Path = typer.Argument(help="Resume file (PDF/DOCX/TXT/MD)"),
    job: Path = typer.Option(..., "--job", "-j", help="Job posting file (JSON/YAML/TXT)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Score a resume against a job posting."""
    _setup_logging(verbose)
    _require_file(resume, "Resume file")
    _require_file(job, "Job posting file")
    config = load_config()
    try:
        structured = parse_resume(resume)
        posting = load_job_posting(job)
    except (ResumeStudioError, ValueError) as e:
        _fail(str(e))

    result = score_match(structured, posting, config.scoring)
    color = "green" if result.overall >= 60 else "yellow" if result.overall >= 40 else "red"
    details = result.details
    console.print(Panel(
        f"[bold {color}]{result.overall}/100 - {result.label}[/bold {color}]\n\n"
        f"Skills: {result.skills} | Experience: {result.experience} | "
        f"Title: {result.title} | Keywords: {result.keywords}\n\n"
        f"Matched skills: {', '.join(details.matched_skills) or '-'}\n"
        f"Missing skills: {', '.join(details.missing_skills) or '-'}\n"
        f"Experience: {details.experience_gap_description}\n"
        f"Title: {details.title_similarity_description}\n"
        f"Keywords: {details.keyword_matches}/{details.total_keywords}",
        title=f"{posting.title or 'Job'} @ {posting.company_name or '?'}",
    ))


@app.command()
def tailor(
    resume: Path = typer.Argument(help="Resume file (PDF/DOCX/TXT/MD)"),
    job: Path = typer.Option(..., "--job", "-j", help="Job posting file (JSON/YAML/TXT)"),
    output: Path = typer.Option(None, "--output", "-o", help="Output .docx path"),
    cover_letter: bool = typer.Option(False, "--cover-letter", help="Also write a cover letter .docx"),
    name: str = typer.Option("", "--name", help="Name to sign the cover letter with"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Tailor a resume to a job posting and write the new document."""
    _setup_logging(verbose)
    _require_file(resume, "Resume file")
    _require_file(job, "Job posting file")

    config = load_config()
    try:
        posting = load_job_posting(job)
    except ValueError as e:
        _fail(f"Could not read job posting: {e}")

    llm = LLMClient(config=config.llm) if config.llm.enabled else None
    if llm is None:
        console.print("[yellow]AI is disabled in config; original content will be kept.[/yellow]")
    pipeline = TailoringPipeline(llm, config, cache=_open_cache(config))

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Tailoring resume...", total=None)

            def on_phase(phase: str, detail: str) -> None:
                progress.update(task, description=detail)

            def on_progress(percent: int, message: str) -> None:
                progress.update(task, description=f"{message} ({percent}%)")

            result = asyncio.run(
                pipeline.run(
                    resume,
                    posting,
                    include_cover_letter=cover_letter,
                    user_settings=UserSettings(name=name),
                    on_phase=on_phase,
                    on_progress=on_progress,
                )
            )
    except ResumeStudioError as e:
        _fail(f"Tailoring failed: {e}")

    if output is None:
        output = Path(f"./output/{resume.stem}_{job_key(posting)}.docx")
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.synthesis.document)
    console.print(
        f"\n[green]Resume saved: {output}[/green] "
        f"[dim]({result.synthesis.method.value} synthesis)[/dim]"
    )

    if result.cover_letter_docx is not None:
        letter_path = output.with_name(f"{output.stem}_cover_letter.docx")
        letter_path.write_bytes(result.cover_letter_docx)
        console.print(f"[green]Cover letter saved: {letter_path}[/green]")

    summary = (
        f"Match score: [bold]{result.score.overall}[/bold] ({result.score.label})\n"
        f"Bullets written: {result.synthesis.written_count}\n"
        f"Elapsed: {result.elapsed_seconds:.1f}s"
    )
    if llm is not None:
        # every call of the run, work-history extraction included
        usage = llm.get_token_summary()
        summary += f"\nTokens: {usage['input']:,} in / {usage['output']:,} out ({len(usage['calls'])} calls)"
    console.print(Panel(summary, title="Result"))

    table = Table(title="Bullet status")
    table.add_column("#", justify="right")
    table.add_column("State")
    table.add_column("Text")
    for status in result.synthesis.bullet_update_status:
        style = _STATE_STYLE[status.state]
        table.add_row(
            str(status.bullet_index),
            f"[{style}]{status.state.value}[/{style}]",
            status.enhanced_text,
        )
    console.print(table)

    manual = result.synthesis.manual_copy_needed
    if manual:
        console.print("\n[yellow]Copy these bullets into the document by hand:[/yellow]")
        for status in manual:
            console.print(f"  - {status.enhanced_text}")


@app.command("cache-stats")
def cache_stats() -> None:
    """Show materials cache statistics."""
    config = load_config()
    stats = _open_cache(config).stats()
    console.print(
        f"Entries: {stats['total']} (active {stats['active']}, expired {stats['expired']})"
    )


@app.command("cache-clear")
def cache_clear() -> None:
    """Delete every cached entry."""
    config = load_config()
    removed = _open_cache(config).clear()
    console.print(f"[green]Removed {removed} cached entries.[/green]")


if __name__ == "__main__":
    app()
