"""Article Harvester CLI using Typer."""

import logging
import os
from pathlib import Path

import typer
from dotenv import load_dotenv

from article_harvester import __version__
from article_harvester.cli.ingest import ingest_app

# Load .env file from current directory or project root
_env_paths = [
    Path.cwd() / ".env",
    Path(__file__).parent.parent.parent / ".env",
]
for _env_path in _env_paths:
    if _env_path.exists():
        load_dotenv(_env_path)
        break

app = typer.Typer(
    name="article-harvester",
    help="Article Harvester - incremental crawler and article extractor",
    add_completion=False,
)
app.add_typer(ingest_app, name="ingest")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.command()
def run(
    host: str = typer.Option("127.0.0.1", "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(
        False, "--reload", "-r", help="Enable auto-reload for development"
    ),
) -> None:
    """Start the Article Harvester API server."""
    import uvicorn

    typer.echo(f"Starting Article Harvester on http://{host}:{port}")
    typer.echo("Press Ctrl+C to stop the server")
    typer.echo("")

    uvicorn.run(
        "article_harvester.web.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


@app.command()
def init_db() -> None:
    """Initialize the database (create tables)."""
    from article_harvester.db.engine import init_db as db_init

    typer.echo("Initializing database...")
    db_init()
    typer.echo("Database initialized successfully!")


@app.command()
def migrate() -> None:
    """Apply Alembic migrations up to the latest revision."""
    from article_harvester.db.engine import run_migrations

    typer.echo("Running migrations...")
    run_migrations()
    typer.echo("Database is up to date.")


@app.command()
def version() -> None:
    """Show the Article Harvester version."""
    typer.echo(f"Article Harvester v{__version__}")


@app.command()
def check_config() -> None:
    """Show the site, database and queue settings in effect."""
    from article_harvester.db.engine import get_database_url
    from article_harvester.ingestion.site_config import get_default_config

    typer.echo("Article Harvester Configuration")
    typer.echo("=" * 40)

    env_file = next((p for p in _env_paths if p.exists()), None)
    typer.echo(f"  .env file: {env_file or 'Not found'}")
    typer.echo(f"  Site config: {os.environ.get('HARVESTER_CONFIG_PATH', 'config/site.yaml')}")

    config = get_default_config()
    typer.echo("")
    typer.echo(f"  Origin: {config.origin}")
    typer.echo(f"  User agent: {config.user_agent}")
    typer.echo(
        f"  Requests: {config.request_delay_ms} ms apart, {config.request_timeout}s timeout, "
        f"{config.max_retries} attempt(s)"
    )
    typer.echo(f"  File extensions: {' '.join(config.file_extensions)}")
    typer.echo(f"  Tag pattern: {config.patterns.tag}")
    typer.echo(f"  Category pattern: {config.patterns.category}")
    typer.echo(f"  Article pattern: {config.patterns.article}")

    typer.echo("")
    typer.echo(f"  Database: {get_database_url()}")
    typer.echo(
        f"  Redis: {os.environ.get('REDIS_HOST', 'localhost')}:"
        f"{os.environ.get('REDIS_PORT', '6379')}/{os.environ.get('REDIS_DB', '0')}"
    )


if __name__ == "__main__":
    app()
