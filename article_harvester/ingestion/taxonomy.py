"""
Taxonomy Classifier Module
==========================

Derives Tag and Category rows from links already classified as tag or
category archives. The slug is read from the URL, turned into a display
name ("node-based-design" -> "Node Based Design") and upserted by name.
Links whose href does not have the expected shape are marked Error and
stay out of the taxonomy tables until manually reset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from article_harvester.core.enums import CrawlStatus, TaxonomyKind
from article_harvester.core.errors import ClassificationError, PersistenceError
from article_harvester.core.schema import LinkRecord
from article_harvester.db.repositories import CategoryRepository, LinkRepository, TagRepository
from article_harvester.ingestion.normalizer import name_from_slug
from article_harvester.ingestion.site_config import SiteConfig, get_default_config

logger = logging.getLogger(__name__)


@dataclass
class TaxonomyReport:
    """Outcome of a taxonomy classification run."""

    tags_created: int = 0
    categories_created: int = 0
    existing: int = 0
    errors: int = 0


class TaxonomyClassifier:
    """Builds taxonomy rows from Tag and Category links."""

    def __init__(self, session: Session, config: SiteConfig | None = None) -> None:
        self.session = session
        self.config = config or get_default_config()
        self.links = LinkRepository(session)
        self.tags = TagRepository(session)
        self.categories = CategoryRepository(session)

    def slug_for(self, record: LinkRecord) -> tuple[TaxonomyKind, str]:
        """
        Read the taxonomy slug from a link.

        Raises:
            ClassificationError: If the href lacks the expected shape.
        """
        kind = TaxonomyKind.TAG if record.status == CrawlStatus.TAG else TaxonomyKind.CATEGORY
        match = self.config.patterns.compiled(kind.value).search(record.href)
        if match is None or not match.group(1):
            raise ClassificationError(record.href)
        return kind, match.group(1)

    def run(self) -> TaxonomyReport:
        """Process every link currently in Tag or Category status."""
        report = TaxonomyReport()
        records = self.links.list_by_status(CrawlStatus.TAG) + self.links.list_by_status(
            CrawlStatus.CATEGORY
        )
        logger.info(f"Classifying {len(records)} taxonomy links")

        for record in records:
            try:
                self._classify(record, report)
                self.session.commit()
            except SQLAlchemyError as e:
                self.session.rollback()
                raise PersistenceError(f"Taxonomy write failed for {record.href}: {e}") from e

        logger.info(
            f"Taxonomy: {report.tags_created} tags, {report.categories_created} categories "
            f"created, {report.existing} existing, {report.errors} errors"
        )
        return report

    def _classify(self, record: LinkRecord, report: TaxonomyReport) -> None:
        try:
            kind, slug = self.slug_for(record)
        except ClassificationError as e:
            logger.warning(str(e))
            self.links.set_status(record.href, CrawlStatus.ERROR)
            report.errors += 1
            return

        name = name_from_slug(slug)
        if kind == TaxonomyKind.TAG:
            _, created = self.tags.get_or_create(name, slug=slug.lower())
            if created:
                report.tags_created += 1
        else:
            _, created = self.categories.get_or_create(name)
            if created:
                report.categories_created += 1

        if not created:
            report.existing += 1
        logger.debug(f"{kind.value} '{name}' from {record.href} ({'new' if created else 'exists'})")
