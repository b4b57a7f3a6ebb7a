"""
Link Frontier Module
====================

Breadth-first link discovery over the configured origin.

Each run rebuilds a Frontier from the persisted link table, fetches every
Pending URL in discovery order, records the outcome (Visited, Error or
File) and queues newly found same-origin links as Pending. A maintenance
pass that removes redundant rows and forces binary links to File runs at
the start of each crawl.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from article_harvester.core.enums import CrawlStatus
from article_harvester.core.errors import PersistenceError, TransportError
from article_harvester.core.schema import CrawlSummary, LinkRecord, MaintenanceReport
from article_harvester.db.repositories import LinkRepository
from article_harvester.ingestion.crawler import Fetcher, PageFetcher, extract_links
from article_harvester.ingestion.normalizer import is_file_link, normalize_url
from article_harvester.ingestion.site_config import SiteConfig, get_default_config

logger = logging.getLogger(__name__)


class Frontier:
    """
    In-memory working sets for one crawl run.

    ``visited`` holds every href that must not be fetched again (any
    non-Pending status); ``to_visit`` is an insertion-ordered set of
    Pending hrefs.
    """

    def __init__(
        self,
        visited: Iterable[str] = (),
        to_visit: Iterable[str] = (),
    ) -> None:
        self.visited: set[str] = set(visited)
        self.to_visit: dict[str, None] = dict.fromkeys(
            href for href in to_visit if href not in self.visited
        )

    @classmethod
    def load(cls, links: LinkRepository) -> Frontier:
        """Rehydrate the working sets from persisted link records."""
        visited: list[str] = []
        pending: list[str] = []
        for record in links.list_all():
            if record.status == CrawlStatus.PENDING:
                pending.append(record.href)
            else:
                visited.append(record.href)
        return cls(visited=visited, to_visit=pending)

    def __len__(self) -> int:
        return len(self.to_visit)

    def __bool__(self) -> bool:
        return bool(self.to_visit)

    def knows(self, href: str) -> bool:
        """Check if an href is already visited or queued."""
        return href in self.visited or href in self.to_visit

    def add(self, href: str) -> bool:
        """Queue an href unless it is already known. Returns True if queued."""
        if self.knows(href):
            return False
        self.to_visit[href] = None
        return True

    def pop(self) -> str:
        """Remove and return the earliest queued href."""
        href = next(iter(self.to_visit))
        del self.to_visit[href]
        return href

    def mark_visited(self, href: str) -> None:
        self.to_visit.pop(href, None)
        self.visited.add(href)

    def requeue(self, href: str) -> None:
        """Queue an href again even if it was visited."""
        self.visited.discard(href)
        self.to_visit[href] = None


# ============================================================================
# Maintenance
# ============================================================================


def find_duplicate_links(links: Iterable[LinkRecord]) -> list[LinkRecord]:
    """Return every record whose href was already seen earlier in the list."""
    seen: set[str] = set()
    duplicates = []
    for record in links:
        if record.href in seen:
            duplicates.append(record)
        else:
            seen.add(record.href)
    return duplicates


def find_unnormalized_links(links: Iterable[LinkRecord]) -> list[LinkRecord]:
    """Return every record whose href differs from its normalized form."""
    return [record for record in links if normalize_url(record.href) != record.href]


def find_file_links(
    links: Iterable[LinkRecord], extensions: Iterable[str]
) -> list[LinkRecord]:
    """Return records pointing at binary resources that are not yet File."""
    extensions = list(extensions)
    return [
        record
        for record in links
        if record.status != CrawlStatus.FILE and is_file_link(record.href, extensions)
    ]


def maintain(session: Session, config: SiteConfig | None = None) -> MaintenanceReport:
    """
    Clean up the link table. Safe to run any number of times.

    Args:
        session: Database session (committed on success)
        config: Site configuration (defaults to the process config)

    Returns:
        Counts of rows deleted and re-marked
    """
    config = config or get_default_config()
    links = LinkRepository(session)
    report = MaintenanceReport()

    try:
        records = links.list_all()

        duplicates = find_duplicate_links(records)
        report.duplicates_deleted = links.delete_ids(r.id for r in duplicates)

        duplicate_ids = {r.id for r in duplicates}
        remaining = [r for r in records if r.id not in duplicate_ids]
        unnormalized = find_unnormalized_links(remaining)
        report.unnormalized_deleted = links.delete_ids(r.id for r in unnormalized)

        unnormalized_ids = {r.id for r in unnormalized}
        remaining = [r for r in remaining if r.id not in unnormalized_ids]
        for record in find_file_links(remaining, config.file_extensions):
            links.set_status(record.href, CrawlStatus.FILE)
            report.files_marked += 1

        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f"Link maintenance failed: {e}") from e

    logger.info(
        f"Maintenance: {report.duplicates_deleted} duplicates, "
        f"{report.unnormalized_deleted} unnormalized deleted, "
        f"{report.files_marked} marked as files"
    )
    return report


# ============================================================================
# Crawl Loop
# ============================================================================


class LinkCrawler:
    """
    Persisted breadth-first crawler for a single origin.

    Usage:
        with get_session() as session:
            summary = await LinkCrawler(session).run()
    """

    def __init__(
        self,
        session: Session,
        fetcher: PageFetcher | None = None,
        config: SiteConfig | None = None,
    ) -> None:
        self.session = session
        self.config = config or get_default_config()
        self.fetcher = fetcher or Fetcher.from_config(self.config)
        self.links = LinkRepository(session)

    async def run(self, max_pages: int | None = None) -> CrawlSummary:
        """
        Run or resume the crawl until the frontier is empty.

        Args:
            max_pages: Optional limit on URLs popped in this run

        Returns:
            CrawlSummary of this run

        Raises:
            PersistenceError: If a status or discovery write fails.
        """
        maintain(self.session, self.config)

        frontier = Frontier.load(self.links)
        self._seed(frontier)
        summary = CrawlSummary()
        logger.info(f"Crawl starting with {len(frontier)} pending links")

        while frontier:
            if max_pages is not None and len(summary.links) >= max_pages:
                logger.info(f"Stopping after {max_pages} pages, {len(frontier)} still pending")
                break

            url = frontier.pop()
            summary.links.append(url)

            if is_file_link(url, self.config.file_extensions):
                frontier.mark_visited(url)
                self._record(url, CrawlStatus.FILE, [])
                summary.files += 1
                continue

            status, found = await self._visit(url)
            frontier.mark_visited(url)
            queued = [href for href in found if frontier.add(href)]
            summary.discovered += self._record(url, status, queued)

            if status == CrawlStatus.VISITED:
                summary.visited += 1
            else:
                summary.errors += 1

        logger.info(
            f"Crawl finished: {summary.visited} visited, {summary.errors} errors, "
            f"{summary.files} files, {summary.discovered} new links"
        )
        return summary

    def _seed(self, frontier: Frontier) -> None:
        if frontier:
            return
        root = self.config.root_url
        record = self.links.get_by_href(root)
        if record is None:
            logger.info(f"Seeding empty frontier with {root}")
            self._write(lambda: self.links.add_pending([root]))
            frontier.add(root)
        elif record.status == CrawlStatus.ERROR:
            # A root that failed would otherwise leave nothing to crawl
            logger.info(f"Retrying {root} after an earlier error")
            self._write(lambda: self.links.set_status(root, CrawlStatus.PENDING))
            frontier.requeue(root)

    async def _visit(self, url: str) -> tuple[CrawlStatus, list[str]]:
        try:
            html = await self.fetcher.fetch_text(url)
        except TransportError as e:
            logger.warning(str(e))
            return CrawlStatus.ERROR, []

        try:
            found = extract_links(html, url, self.config.origin)
        except Exception:
            logger.exception(f"Link extraction failed for {url}")
            return CrawlStatus.ERROR, []

        logger.debug(f"Visited {url}: {len(found)} links")
        return CrawlStatus.VISITED, found

    def _record(self, url: str, status: CrawlStatus, queued: list[str]) -> int:
        """Persist the outcome for ``url`` and new Pending hrefs."""

        def write() -> int:
            self.links.set_status(url, status)
            return len(self.links.add_pending(queued))

        return self._write(write)

    def _write(self, operation):
        try:
            result = operation()
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(f"Crawl state write failed: {e}") from e
        return result
