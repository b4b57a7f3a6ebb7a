"""Ingestion routes: crawl, classify, extract and export.

Batch-style endpoints answer 200 and embed per-item outcomes in the
payload. A crawl halted by a storage error and a failed single-link run
raise, and the app turns that into a 500.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response

from article_harvester.db.engine import get_session
from article_harvester.ingestion.classifier import LinkClassifier
from article_harvester.ingestion.frontier import LinkCrawler
from article_harvester.ingestion.runners import BatchRunner, SingleLinkRunner
from article_harvester.ingestion.taxonomy import TaxonomyClassifier
from article_harvester.services.export_service import LinkExportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["ingest"])


@router.get("/crawl")
async def crawl() -> JSONResponse:
    """
    Run or resume link discovery.

    Returns the number of newly discovered links and the links handled
    in this run.
    """
    with get_session() as session:
        summary = await LinkCrawler(session).run()

    logger.info(f"Crawl request handled {len(summary.links)} links")
    return JSONResponse(summary.model_dump(mode="json"))


@router.get("/classify-links")
async def classify_links() -> JSONResponse:
    """Assign File, Tag, Category or Article status to visited links."""
    with get_session() as session:
        counts = LinkClassifier(session).run()

    return JSONResponse({status.label: count for status, count in counts.items()})


@router.get("/classify")
async def classify_taxonomy() -> JSONResponse:
    """Create tag and category rows from taxonomy links."""
    with get_session() as session:
        TaxonomyClassifier(session).run()

    return JSONResponse({"data": "ok"})


@router.get("/scrape")
async def scrape_batch() -> JSONResponse:
    """Ingest every unprocessed article link."""
    with get_session() as session:
        report = await BatchRunner(session).run()

    return JSONResponse(report.model_dump(mode="json", exclude_none=True))


@router.get("/process-link")
async def process_link() -> JSONResponse:
    """Ingest the oldest unprocessed article link."""
    with get_session() as session:
        outcome = await SingleLinkRunner(session).run()

    return JSONResponse(outcome.model_dump(mode="json", exclude_none=True))


@router.get("/export-links")
async def export_links() -> Response:
    """Download every discovered link as JSON."""
    with get_session() as session:
        document = LinkExportService(session).export_links_json()

    return Response(
        content=document,
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="found_links.json"'},
    )
