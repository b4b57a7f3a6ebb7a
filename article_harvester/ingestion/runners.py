"""
Ingestion Runners Module
========================

Turns Article links into stored articles. Two policies are provided:

BatchRunner
    Processes every unprocessed Article link in one pass. A failure on
    one link is recorded and the run moves on. Writes made before the
    failure are kept; there is no existence check, so retrying such a
    link can hit unique-constraint errors.

SingleLinkRunner
    Processes the oldest unprocessed Article link. An article already
    stored under the same link only gets its link stamped as processed.
    On failure the article this run inserted, if any, is deleted by id
    before the error is re-raised, so the next attempt starts clean. An
    article another runner stored under the same link is left alone.
    Several of these can run side by side; they rely on this check and
    on unique constraints, not on locking.

Both runners commit after each write step and stamp ``processed_at``
only after the article, its taxonomy links and its comments are stored.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from article_harvester.core.enums import ResultStatus
from article_harvester.core.errors import PersistenceError
from article_harvester.core.schema import Article, BatchReport, IngestResult, SingleLinkOutcome
from article_harvester.db.repositories import (
    ArticleRepository,
    CategoryRepository,
    CommentRepository,
    LinkRepository,
    TagRepository,
)
from article_harvester.ingestion.extractor import ContentExtractor, Extraction
from article_harvester.ingestion.normalizer import slugify

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ArticleWriter:
    """Stores one extraction, committing after each step."""

    def __init__(self, session: Session) -> None:
        self.session = session
        # Article inserted by the latest save, kept even if a later step fails
        self.created: Article | None = None
        self.links = LinkRepository(session)
        self.articles = ArticleRepository(session)
        self.comments = CommentRepository(session)
        self.tags = TagRepository(session)
        self.categories = CategoryRepository(session)

    def commit(self, operation: Callable[[], T], step: str) -> T:
        """
        Run a write and commit it.

        Raises:
            PersistenceError: If the write or commit fails.
        """
        try:
            result = operation()
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(f"Failed to {step}: {e}") from e
        return result

    def save(self, extraction: Extraction, link: str) -> Article:
        """
        Store an article with its taxonomy links and comments.

        Args:
            extraction: Parsed page
            link: Canonical link to store the article under

        Returns:
            The stored article
        """
        extracted = extraction.article
        self.created = None
        article = self.commit(
            lambda: self.articles.create(extracted, link=link), f"insert article {link}"
        )
        self.created = article

        for name in dict.fromkeys(extracted.categories):
            self.commit(lambda: self._link_category(article, name), f"add category '{name}'")

        for name in dict.fromkeys(extracted.tags):
            self.commit(lambda: self._link_tag(article, name), f"add tag '{name}'")

        if extraction.comments:
            self.commit(
                lambda: self.comments.bulk_create(article.id, extraction.comments),
                f"insert comments for {link}",
            )

        logger.info(
            f"Saved '{article.title}' ({len(extracted.categories)} categories, "
            f"{len(extracted.tags)} tags, {len(extraction.comments)} comments)"
        )
        return article

    def mark_processed(self, link_id: UUID, href: str) -> None:
        self.commit(lambda: self.links.mark_processed(link_id), f"mark {href} processed")

    def _link_category(self, article: Article, name: str) -> None:
        category, _ = self.categories.get_or_create(name)
        self.articles.add_category(article.id, category.id)

    def _link_tag(self, article: Article, name: str) -> None:
        tag, _ = self.tags.get_or_create(name, slug=slugify(name))
        self.articles.add_tag(article.id, tag.id)


class BatchRunner:
    """Ingests every unprocessed Article link, isolating per-link failures."""

    def __init__(self, session: Session, extractor: ContentExtractor | None = None) -> None:
        self.session = session
        self.extractor = extractor or ContentExtractor()
        self.writer = ArticleWriter(session)

    async def run(self, limit: int | None = None) -> BatchReport:
        """
        Process unprocessed Article links in discovery order.

        Args:
            limit: Optional maximum number of links to process

        Returns:
            BatchReport with one result per attempted link
        """
        pending = self.writer.links.list_unprocessed_articles()
        if limit is not None:
            pending = pending[:limit]
        logger.info(f"Batch ingestion of {len(pending)} article links")

        report = BatchReport()
        for record in pending:
            report.processed += 1
            try:
                extraction = await self.extractor.extract(record.href)
                self.writer.save(extraction, record.href)
                self.writer.mark_processed(record.id, record.href)
            except Exception as e:
                self.session.rollback()
                logger.exception(f"Error processing {record.href}")
                report.results.append(
                    IngestResult(url=record.href, status=ResultStatus.ERROR, error=str(e))
                )
                continue

            report.results.append(IngestResult(url=record.href, status=ResultStatus.SUCCESS))

        logger.info(f"Batch finished: {report.succeeded} succeeded, {report.failed} failed")
        return report


class SingleLinkRunner:
    """Ingests the oldest unprocessed Article link with compensation on failure."""

    def __init__(self, session: Session, extractor: ContentExtractor | None = None) -> None:
        self.session = session
        self.extractor = extractor or ContentExtractor()
        self.writer = ArticleWriter(session)

    async def run(self) -> SingleLinkOutcome:
        """
        Process one link.

        Returns:
            Outcome message and the link handled, if any

        Raises:
            HarvesterError: Whatever stopped ingestion, after compensation.
        """
        record = self.writer.links.oldest_unprocessed_article()
        if record is None:
            logger.info("No unprocessed article links")
            return SingleLinkOutcome(message="No unprocessed links found")

        href = record.href
        if self.writer.articles.get_by_link(href) is not None:
            logger.info(f"Article for {href} already exists, marking processed")
            self.writer.mark_processed(record.id, href)
            return SingleLinkOutcome(message="Article already exists", link=href)

        self.writer.created = None
        try:
            extraction = await self.extractor.extract(href)
            self.writer.save(extraction, href)
            self.writer.mark_processed(record.id, href)
        except Exception:
            logger.exception(f"Error processing {href}")
            self.session.rollback()
            if self.writer.created is not None:
                self._compensate(self.writer.created, href)
            raise

        return SingleLinkOutcome(message="Successfully processed link", link=href)

    def _compensate(self, article: Article, href: str) -> None:
        try:
            if self.writer.articles.delete(article.id):
                logger.info(f"Deleted partial article for {href}")
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception(f"Compensating delete failed for {href}")
