"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from jd_match.clients.search_client import build_search_client
from jd_match.config import AppConfig, load_config, select_provider
from jd_match.models.jobs import JobSearchPreferences
from jd_match.pipeline.analyzer import AnalysisOrchestrator
from jd_match.pipeline.errors import InputError
from jd_match.pipeline.job_search import JobDiscoveryPipeline

app = typer.Typer(
    name="jd-match",
    help="Resume to job description matching, job discovery and cover letters",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.INFO if verbose else logging.WARNING,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )


def _read_text(path: Path, what: str) -> str:
    if not path.exists():
        console.print(f"[red]{what} file not found: {path}[/red]")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


def _orchestrator(config: AppConfig) -> AnalysisOrchestrator:
    return AnalysisOrchestrator.from_provider(
        select_provider(config.llm),
        config.llm,
        cover_letter_min_length=config.cover_letter.min_length,
    )


def _run(coro):
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task("Working...", total=None)
            return asyncio.run(coro)
    except InputError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)


def _score_color(score: int) -> str:
    if score >= 70:
        return "green"
    return "yellow" if score >= 40 else "red"


@app.command()
def analyze(
    jd: Path = typer.Option(..., "--jd", help="Job description text file"),
    resume: Path = typer.Option(..., "--resume", help="Resume text file"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show pipeline logs"),
) -> None:
    """Score how well a resume fits a job description."""
    _setup_logging(verbose)
    job_text = _read_text(jd, "Job description")
    resume_text = _read_text(resume, "Resume")
    config = load_config()

    result = _run(_orchestrator(config).analyze(job_text, resume_text))
    if as_json:
        typer.echo(result.model_dump_json(indent=2))
        return

    color = _score_color(result.score)
    console.print(
        Panel(
            f"[bold {color}]Score: {result.score}/100[/bold {color}]"
            f"\nMatched: {', '.join(result.matched_skills) or '-'}"
            f"\nMissing: {', '.join(result.missing_skills) or '-'}"
            + (f"\n\n{result.short_summary}" if result.short_summary else ""),
            title=f"Fit analysis ({result.source})",
        )
    )
    console.print("\n[bold]Suggestions:[/bold]")
    for suggestion in result.suggestions:
        console.print(f"  - {suggestion}")


@app.command()
def jobs(
    resume: Path = typer.Option(..., "--resume", help="Resume text file"),
    role: str = typer.Option("software engineer", "--role", help="Target role"),
    location: str = typer.Option(None, "--location", "-l", help="Preferred location"),
    keywords: str = typer.Option(None, "--keywords", "-k", help="Extra search keywords"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show pipeline logs"),
) -> None:
    """Search for job postings and rank them against a resume."""
    _setup_logging(verbose)
    resume_text = _read_text(resume, "Resume")
    config = load_config()

    search = build_search_client()
    if search is None and not as_json:
        console.print("[yellow]TAVILY_API_KEY not set, showing demo listings.[/yellow]")
    pipeline = JobDiscoveryPipeline(
        search,
        _orchestrator(config),
        max_results=config.search.max_results,
        search_depth=config.search.search_depth,
        max_ranked_jobs=config.pipeline.max_ranked_jobs,
        scoring_concurrency=config.pipeline.scoring_concurrency,
        fetch_threshold=config.search.fetch_threshold,
        description_limit=config.pipeline.description_limit,
    )
    preferences = JobSearchPreferences(role=role, location=location, keywords=keywords)

    result = _run(pipeline.search_and_rank(resume_text, preferences))
    if as_json:
        typer.echo(result.model_dump_json(by_alias=True, indent=2))
        return

    if not result.jobs:
        console.print("[yellow]No job postings found.[/yellow]")
        console.print(f"[dim]Query: {result.search_query}[/dim]")
        return

    table = Table(title=f"Top {len(result.jobs)} of {result.total_found} postings")
    table.add_column("Score", justify="right")
    table.add_column("Title")
    table.add_column("Company")
    table.add_column("URL", overflow="fold")
    for job in result.jobs:
        score = job.score or 0
        color = _score_color(score)
        table.add_row(
            f"[{color}]{score}[/{color}]",
            job.title,
            job.company or "-",
            "(demo)" if job.is_placeholder else job.url,
        )
    console.print(table)
    console.print(f"[dim]Query: {result.search_query}[/dim]")


@app.command()
def strength(
    resume: Path = typer.Option(..., "--resume", help="Resume text file"),
    jd: Path = typer.Option(None, "--jd", help="Optional target job description file"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show pipeline logs"),
) -> None:
    """Score resume quality on overall, ATS, skill diversity and experience depth."""
    _setup_logging(verbose)
    resume_text = _read_text(resume, "Resume")
    job_text = _read_text(jd, "Job description") if jd else None
    config = load_config()

    result = _run(_orchestrator(config).score_resume(resume_text, job_text))
    if as_json:
        typer.echo(result.model_dump_json(indent=2))
        return

    console.print(
        Panel(
            f"Overall: {result.overall_score} | ATS: {result.ats_score} | "
            f"Diversity: {result.skill_diversity_score} | Depth: {result.experience_depth_score}"
            f"\n[bold]Composite: {result.composite_score}[/bold]"
            + (f"\n\n{result.summary}" if result.summary else ""),
            title=f"Resume strength ({result.source})",
        )
    )
    for label, items in (
        ("Strengths", result.strengths),
        ("Weaknesses", result.weaknesses),
        ("Improvements", result.improvement_suggestions),
    ):
        if items:
            console.print(f"\n[bold]{label}:[/bold]")
            for item in items:
                console.print(f"  - {item}")


@app.command("cover-letter")
def cover_letter(
    jd: Path = typer.Option(..., "--jd", help="Job description text file"),
    resume: Path = typer.Option(..., "--resume", help="Resume text file"),
    company: str = typer.Option(None, "--company", "-c", help="Company name"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the letter to this file"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show pipeline logs"),
) -> None:
    """Draft a cover letter body for a job description."""
    _setup_logging(verbose)
    job_text = _read_text(jd, "Job description")
    resume_text = _read_text(resume, "Resume")
    config = load_config()

    letter = _run(_orchestrator(config).write_cover_letter(job_text, resume_text, company))
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(letter.body + "\n", encoding="utf-8")
        console.print(f"[green]Cover letter saved: {output}[/green]")
    if as_json:
        typer.echo(letter.model_dump_json(indent=2))
        return
    if output is None:
        console.print(Panel(letter.body, title=f"Cover letter ({letter.source})"))


if __name__ == "__main__":
    app()
