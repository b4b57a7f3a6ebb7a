"""
Ingestion CLI Commands
======================

CLI commands for running the crawl, classification and extraction stages.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from article_harvester.core.enums import CrawlStatus
from article_harvester.core.errors import HarvesterError
from article_harvester.db.engine import get_session
from article_harvester.db.repositories import LinkRepository
from article_harvester.ingestion.classifier import LinkClassifier
from article_harvester.ingestion.frontier import LinkCrawler, maintain
from article_harvester.ingestion.runners import BatchRunner, SingleLinkRunner
from article_harvester.ingestion.taxonomy import TaxonomyClassifier
from article_harvester.services.export_service import LinkExportService

console = Console()
ingest_app = typer.Typer(help="Ingestion pipeline commands")
jobs_app = typer.Typer(help="Queued job commands")

ingest_app.add_typer(jobs_app, name="jobs")


@ingest_app.command("crawl")
def crawl(
    max_pages: Optional[int] = typer.Option(None, "--max", "-m", help="Maximum pages to fetch"),
) -> None:
    """
    Run or resume link discovery.

    Examples:
        article-harvester ingest crawl
        article-harvester ingest crawl --max=50
    """
    try:
        with get_session() as session:
            with console.status("[bold blue]Crawling...[/bold blue]"):
                summary = asyncio.run(LinkCrawler(session).run(max_pages=max_pages))
    except HarvesterError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    rprint("\n[bold]Crawl finished[/bold]")
    rprint(f"  Pages visited: {summary.visited}")
    rprint(f"  Errors: {summary.errors}")
    rprint(f"  Files: {summary.files}")
    rprint(f"  New links: {summary.discovered}")


@ingest_app.command("maintain")
def maintain_links() -> None:
    """Delete redundant link rows and mark binary links as files."""
    try:
        with get_session() as session:
            report = maintain(session)
    except HarvesterError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    rprint(f"Duplicates deleted: {report.duplicates_deleted}")
    rprint(f"Unnormalized deleted: {report.unnormalized_deleted}")
    rprint(f"Marked as files: {report.files_marked}")


@ingest_app.command("classify-links")
def classify_links() -> None:
    """Assign File, Tag, Category or Article status to visited links."""
    with get_session() as session:
        counts = LinkClassifier(session).run()

    if not counts:
        rprint("[yellow]No visited links matched a known shape[/yellow]")
        return
    for status, count in counts.items():
        rprint(f"  {status.label}: {count}")


@ingest_app.command("classify")
def classify_taxonomy() -> None:
    """Create tag and category rows from taxonomy links."""
    with get_session() as session:
        report = TaxonomyClassifier(session).run()

    rprint(f"Tags created: {report.tags_created}")
    rprint(f"Categories created: {report.categories_created}")
    rprint(f"Already present: {report.existing}")
    if report.errors:
        rprint(f"[yellow]Links marked as errors: {report.errors}[/yellow]")


@ingest_app.command("scrape")
def scrape(
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Maximum links to process"),
) -> None:
    """
    Ingest every unprocessed article link.

    Examples:
        article-harvester ingest scrape
        article-harvester ingest scrape --limit=10
    """
    with get_session() as session:
        with console.status("[bold blue]Scraping...[/bold blue]"):
            report = asyncio.run(BatchRunner(session).run(limit=limit))

    rprint(f"\n[bold]Processed {report.processed} links[/bold]")
    rprint(f"  [green]Succeeded: {report.succeeded}[/green]")
    failures = [r for r in report.results if r.error]
    if failures:
        rprint(f"\n[bold red]Errors ({len(failures)}):[/bold red]")
        for result in failures[:10]:
            rprint(f"  • {result.url}: {result.error}")
        if len(failures) > 10:
            rprint(f"  ... and {len(failures) - 10} more")


@ingest_app.command("process-link")
def process_link() -> None:
    """Ingest the oldest unprocessed article link."""
    try:
        with get_session() as session:
            outcome = asyncio.run(SingleLinkRunner(session).run())
    except HarvesterError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    rprint(outcome.message)
    if outcome.link:
        rprint(f"  Link: {outcome.link}")


@ingest_app.command("export-links")
def export_links(
    output: Path = typer.Option(Path("found_links.json"), "--output", "-o", help="Output file"),
    status: Optional[str] = typer.Option(None, "--status", "-s", help="Only links with this status"),
) -> None:
    """
    Export discovered links to a JSON file.

    Examples:
        article-harvester ingest export-links
        article-harvester ingest export-links --status=article -o articles.json
    """
    status_filter = None
    if status:
        try:
            status_filter = CrawlStatus[status.upper()]
        except KeyError:
            rprint(f"[red]Error:[/red] Unknown status '{status}'")
            raise typer.Exit(1)

    with get_session() as session:
        count = LinkExportService(session).write_links_json(output, status_filter)

    rprint(f"Exported {count} links to {output}")


@ingest_app.command("reset-errors")
def reset_errors() -> None:
    """Move every Error link back to Pending so the next crawl retries it."""
    with get_session() as session:
        count = LinkRepository(session).reset_errors()
        session.commit()

    rprint(f"Reset {count} links to pending")


@ingest_app.command("status")
def link_status() -> None:
    """Show how many links are in each status."""
    with get_session() as session:
        counts = LinkRepository(session).count_by_status()

    table = Table(title="Links by Status")
    table.add_column("Status", style="bold")
    table.add_column("Count", justify="right")
    for status in CrawlStatus:
        table.add_row(status.label, str(counts.get(status, 0)))

    console.print(table)


@ingest_app.command("enqueue")
def enqueue(
    count: int = typer.Option(1, "--count", "-c", help="Number of single-link jobs"),
) -> None:
    """
    Queue single-link ingestion jobs for arq workers.

    Examples:
        article-harvester ingest enqueue --count=20
    """
    from article_harvester.ingestion.jobs import enqueue_links

    try:
        job_ids = asyncio.run(enqueue_links(count))
    except Exception as e:
        rprint(f"\n[red]Error:[/red] Failed to enqueue jobs: {e}")
        rprint("\nMake sure Redis is running")
        raise typer.Exit(1)

    rprint(f"[green]Enqueued {len(job_ids)} jobs[/green]")
    for job_id in job_ids:
        rprint(f"  {job_id}")


@ingest_app.command("worker")
def start_worker(
    burst: bool = typer.Option(False, "--burst", help="Run in burst mode (exit when queue empty)"),
) -> None:
    """
    Start an ingestion worker.

    The worker processes queued single-link jobs from Redis.

    Examples:
        article-harvester ingest worker
        article-harvester ingest worker --burst
    """
    from arq import run_worker

    from article_harvester.ingestion.jobs import WorkerSettings

    rprint("[bold]Starting ingestion worker...[/bold]")
    rprint("Press Ctrl+C to stop\n")

    try:
        run_worker(WorkerSettings, burst=burst)
    except Exception as e:
        rprint(f"[red]Error:[/red] Worker failed: {e}")
        rprint("\nMake sure Redis is running")
        raise typer.Exit(1)


@jobs_app.command("status")
def job_status(
    job_id: str = typer.Argument(..., help="Job ID to check"),
) -> None:
    """
    Check the status of a queued job.

    Examples:
        article-harvester ingest jobs status abc123
    """
    from article_harvester.ingestion.jobs import get_job_status

    try:
        result = asyncio.run(get_job_status(job_id))
    except Exception as e:
        rprint(f"[red]Error:[/red] Failed to get job status: {e}")
        rprint("\nMake sure Redis is running")
        raise typer.Exit(1)

    if result is None:
        rprint(f"[yellow]Job '{job_id}' not found[/yellow]")
        raise typer.Exit(1)

    rprint(f"\n[bold]Job: {job_id}[/bold]")
    rprint(f"  Status: {result['status']}")
    outcome = result.get("result")
    if isinstance(outcome, dict):
        rprint(f"  Outcome: {outcome.get('status')} - {outcome.get('message')}")
        if outcome.get("link"):
            rprint(f"  Link: {outcome['link']}")
