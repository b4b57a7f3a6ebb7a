"""
Link Classifier Module
======================

Assigns a terminal category to links the crawler has visited, based only
on the shape of their href. Precedence, first match wins:

1. binary file extension -> File
2. tag archive           -> Tag
3. category archive      -> Category
4. article permalink     -> Article

Links matching none of these stay Visited.
"""

from __future__ import annotations

import logging
from collections import Counter

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from article_harvester.core.enums import CrawlStatus
from article_harvester.core.errors import PersistenceError
from article_harvester.db.repositories import LinkRepository
from article_harvester.ingestion.normalizer import is_file_link
from article_harvester.ingestion.site_config import SiteConfig, get_default_config

logger = logging.getLogger(__name__)


class LinkClassifier:
    """Href-shape classifier for Visited links."""

    def __init__(self, session: Session, config: SiteConfig | None = None) -> None:
        self.session = session
        self.config = config or get_default_config()
        self.links = LinkRepository(session)

    def classify_href(self, href: str) -> CrawlStatus | None:
        """
        Decide the category of a single href.

        Returns:
            The status to assign, or None if the href matches no shape.
        """
        if is_file_link(href, self.config.file_extensions):
            return CrawlStatus.FILE

        patterns = self.config.patterns
        if patterns.compiled("tag").search(href):
            return CrawlStatus.TAG
        if patterns.compiled("category").search(href):
            return CrawlStatus.CATEGORY
        if patterns.compiled("article").search(href):
            return CrawlStatus.ARTICLE
        return None

    def run(self) -> dict[CrawlStatus, int]:
        """
        Classify every Visited link.

        Returns:
            Number of links moved into each status
        """
        counts: Counter[CrawlStatus] = Counter()

        try:
            for record in self.links.list_by_status(CrawlStatus.VISITED):
                status = self.classify_href(record.href)
                if status is None:
                    continue
                self.links.set_status(record.href, status)
                counts[status] += 1
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(f"Link classification failed: {e}") from e

        summary = ", ".join(f"{status.label}={n}" for status, n in counts.items()) or "nothing"
        logger.info(f"Classified visited links: {summary}")
        return dict(counts)
