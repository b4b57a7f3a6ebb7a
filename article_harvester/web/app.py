"""FastAPI application factory for Article Harvester.

Pipeline errors that escape a route (storage failures halting a crawl, a
single-link run that failed after cleanup) are turned into a 500 with the
error message as ``detail``.
"""

import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from article_harvester import __version__
from article_harvester.core.errors import HarvesterError
from article_harvester.db.engine import init_db

# Load .env file from project root
_env_file = Path(__file__).resolve().parents[2] / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

logger = logging.getLogger(__name__)


async def harvester_error_handler(request: Request, exc: HarvesterError) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Build the API: ingestion triggers under /api plus read-only article routes."""
    app = FastAPI(
        title="Article Harvester",
        description="Incremental crawler and article extractor for a WordPress-themed site",
        version=__version__,
    )

    init_db()

    app.add_exception_handler(HarvesterError, harvester_error_handler)

    # Imported here so route modules pick up patched collaborators in tests
    from article_harvester.web.routes import articles, ingest

    app.include_router(ingest.router)
    app.include_router(articles.router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app
