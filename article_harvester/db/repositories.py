"""Repository classes for database operations."""

import json
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from article_harvester.core.enums import CrawlStatus
from article_harvester.core.errors import InvalidTransitionError
from article_harvester.core.schema import (
    Article,
    Category,
    Comment,
    ExtractedArticle,
    ExtractedComment,
    LinkRecord,
    Tag,
)
from article_harvester.db.models import (
    ArticleCategoryDB,
    ArticleDB,
    ArticleTagDB,
    CategoryDB,
    CommentDB,
    LinkDB,
    TagDB,
)

# Keeps IN (...) lists below SQLite's bound-parameter limit
_IN_CHUNK = 500


def _utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


def _chunks(items: list[str], size: int = _IN_CHUNK) -> Iterable[list[str]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


# ============================================================================
# Crawl State
# ============================================================================


class LinkRepository:
    """Repository for found_links operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, href: str, status: CrawlStatus = CrawlStatus.PENDING) -> LinkRecord:
        """Create a new link record."""
        db_item = LinkDB(href=href, status=int(status), created_at=_utc_now())
        self.session.add(db_item)
        self.session.flush()
        return self._to_domain(db_item)

    def get_by_href(self, href: str) -> LinkRecord | None:
        """Get a link by its href."""
        db_item = self._get_db_by_href(href)
        return self._to_domain(db_item) if db_item else None

    def list_all(self) -> list[LinkRecord]:
        """List every link in discovery order."""
        stmt = select(LinkDB).order_by(LinkDB.created_at, LinkDB.id)
        result = self.session.execute(stmt).scalars().all()
        return [self._to_domain(link) for link in result]

    def list_by_status(self, status: CrawlStatus) -> list[LinkRecord]:
        """List links with the given status in discovery order."""
        stmt = (
            select(LinkDB)
            .where(LinkDB.status == int(status))
            .order_by(LinkDB.created_at, LinkDB.id)
        )
        result = self.session.execute(stmt).scalars().all()
        return [self._to_domain(link) for link in result]

    def list_unprocessed_articles(self) -> list[LinkRecord]:
        """List Article links that have not been ingested yet."""
        stmt = (
            select(LinkDB)
            .where(LinkDB.status == int(CrawlStatus.ARTICLE))
            .where(LinkDB.processed_at.is_(None))
            .order_by(LinkDB.created_at, LinkDB.id)
        )
        result = self.session.execute(stmt).scalars().all()
        return [self._to_domain(link) for link in result]

    def oldest_unprocessed_article(self) -> LinkRecord | None:
        """Get the oldest Article link that has not been ingested yet."""
        stmt = (
            select(LinkDB)
            .where(LinkDB.status == int(CrawlStatus.ARTICLE))
            .where(LinkDB.processed_at.is_(None))
            .order_by(LinkDB.created_at, LinkDB.id)
            .limit(1)
        )
        db_item = self.session.execute(stmt).scalars().first()
        return self._to_domain(db_item) if db_item else None

    def existing_hrefs(self, hrefs: Iterable[str]) -> set[str]:
        """Return the subset of ``hrefs`` already stored."""
        candidates = list(dict.fromkeys(hrefs))
        found: set[str] = set()
        for chunk in _chunks(candidates):
            stmt = select(LinkDB.href).where(LinkDB.href.in_(chunk))
            found.update(self.session.execute(stmt).scalars().all())
        return found

    def add_pending(self, hrefs: Iterable[str]) -> list[str]:
        """
        Insert hrefs as Pending, skipping any already stored.

        Returns:
            The hrefs that were actually inserted, in input order.
        """
        candidates = list(dict.fromkeys(hrefs))
        known = self.existing_hrefs(candidates)
        added = [href for href in candidates if href not in known]
        now = _utc_now()
        for offset, href in enumerate(added):
            # Distinct timestamps keep discovery order within one batch
            created_at = now + timedelta(microseconds=offset)
            self.session.add(
                LinkDB(href=href, status=int(CrawlStatus.PENDING), created_at=created_at)
            )
        self.session.flush()
        return added

    def set_status(self, href: str, status: CrawlStatus) -> LinkRecord:
        """
        Move a link to a new status.

        Raises:
            ValueError: If the link does not exist.
            InvalidTransitionError: If the change is not allowed.
        """
        db_item = self._get_db_by_href(href)
        if db_item is None:
            raise ValueError(f"Link {href} not found")

        current = CrawlStatus(db_item.status)
        if not current.can_transition(status):
            raise InvalidTransitionError(href, current, status)

        db_item.status = int(status)
        self.session.flush()
        return self._to_domain(db_item)

    def mark_processed(self, link_id: UUID | str) -> None:
        """Stamp processed_at on a link."""
        db_item = self.session.get(LinkDB, str(link_id))
        if db_item is None:
            raise ValueError(f"Link with id {link_id} not found")
        db_item.processed_at = _utc_now()
        self.session.flush()

    def reset_errors(self) -> int:
        """Move every Error link back to Pending so it is crawled again."""
        stmt = select(LinkDB).where(LinkDB.status == int(CrawlStatus.ERROR))
        db_items = self.session.execute(stmt).scalars().all()
        for db_item in db_items:
            db_item.status = int(CrawlStatus.PENDING)
        self.session.flush()
        return len(db_items)

    def delete_ids(self, link_ids: Iterable[UUID | str]) -> int:
        """Delete links by ID."""
        ids = [str(link_id) for link_id in link_ids]
        deleted = 0
        for chunk in _chunks(ids):
            result = self.session.execute(delete(LinkDB).where(LinkDB.id.in_(chunk)))
            deleted += result.rowcount or 0
        self.session.flush()
        return deleted

    def count_by_status(self) -> dict[CrawlStatus, int]:
        """Count links per status."""
        stmt = select(LinkDB.status, func.count()).group_by(LinkDB.status)
        return {CrawlStatus(status): count for status, count in self.session.execute(stmt)}

    def _get_db_by_href(self, href: str) -> LinkDB | None:
        stmt = select(LinkDB).where(LinkDB.href == href)
        return self.session.execute(stmt).scalar_one_or_none()

    def _to_domain(self, db_item: LinkDB) -> LinkRecord:
        """Convert DB model to domain model."""
        return LinkRecord(
            id=UUID(db_item.id),
            href=db_item.href,
            status=CrawlStatus(db_item.status),
            processed_at=db_item.processed_at,
            created_at=db_item.created_at,
        )


# ============================================================================
# Content
# ============================================================================


class ArticleRepository:
    """Repository for articles and their junction rows."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, extracted: ExtractedArticle, link: str) -> Article:
        """Insert the scalar fields of an extracted article."""
        db_item = ArticleDB(
            old_id=extracted.old_id,
            title=extracted.title,
            content=extracted.content,
            link=link,
            images_json=json.dumps(extracted.images),
            related_json=json.dumps([rid for rid in extracted.related_ids if rid is not None]),
            created_at=extracted.created_at,
        )
        self.session.add(db_item)
        self.session.flush()
        return self._to_domain(db_item)

    def get_by_id(self, article_id: UUID | str) -> Article | None:
        """Get an article by ID."""
        db_item = self.session.get(ArticleDB, str(article_id))
        return self._to_domain(db_item) if db_item else None

    def get_by_link(self, link: str) -> Article | None:
        """Get an article by its canonical link."""
        db_item = self._get_db_by_link(link)
        return self._to_domain(db_item) if db_item else None

    def list_recent(self, limit: int = 12, offset: int = 0) -> list[Article]:
        """List articles, newest first."""
        stmt = (
            select(ArticleDB)
            .order_by(ArticleDB.created_at.desc(), ArticleDB.id)
            .limit(limit)
            .offset(offset)
        )
        result = self.session.execute(stmt).scalars().all()
        return [self._to_domain(a) for a in result]

    def count(self) -> int:
        """Get total count of articles."""
        stmt = select(func.count()).select_from(ArticleDB)
        return self.session.execute(stmt).scalar() or 0

    def add_tag(self, article_id: UUID | str, tag_id: UUID | str) -> None:
        """Insert an article/tag junction row."""
        self.session.add(ArticleTagDB(article_id=str(article_id), tag_id=str(tag_id)))
        self.session.flush()

    def add_category(self, article_id: UUID | str, category_id: UUID | str) -> None:
        """Insert an article/category junction row."""
        self.session.add(
            ArticleCategoryDB(article_id=str(article_id), category_id=str(category_id))
        )
        self.session.flush()

    def delete(self, article_id: UUID | str) -> bool:
        """Delete an article (and its comments and junction rows) by ID."""
        db_item = self.session.get(ArticleDB, str(article_id))
        if db_item is None:
            return False
        # Junction rows may have been added after these collections loaded
        self.session.expire(db_item, ["comments", "tag_links", "category_links"])
        self.session.delete(db_item)
        self.session.flush()
        return True

    def _get_db_by_link(self, link: str) -> ArticleDB | None:
        stmt = select(ArticleDB).where(ArticleDB.link == link)
        return self.session.execute(stmt).scalar_one_or_none()

    def _to_domain(self, db_item: ArticleDB) -> Article:
        """Convert DB model to domain model."""
        return Article(
            id=UUID(db_item.id),
            old_id=db_item.old_id,
            title=db_item.title,
            content=db_item.content,
            link=db_item.link,
            images=json.loads(db_item.images_json),
            related_ids=json.loads(db_item.related_json),
            summary=db_item.summary,
            created_at=db_item.created_at,
            tags=[tl.tag.name for tl in db_item.tag_links],
            categories=[cl.category.name for cl in db_item.category_links],
        )


class CommentRepository:
    """Repository for comments."""

    def __init__(self, session: Session):
        self.session = session

    def bulk_create(
        self, article_id: UUID | str, comments: list[ExtractedComment]
    ) -> int:
        """Insert all comments of an article."""
        for comment in comments:
            self.session.add(
                CommentDB(
                    old_id=comment.old_id,
                    author=comment.author,
                    content_json=json.dumps(comment.content),
                    created_at=comment.created_at,
                    article_id=str(article_id),
                )
            )
        self.session.flush()
        return len(comments)

    def list_for_article(self, article_id: UUID | str) -> list[Comment]:
        """List comments of an article in insertion order."""
        stmt = (
            select(CommentDB)
            .where(CommentDB.article_id == str(article_id))
            .order_by(CommentDB.created_at)
        )
        result = self.session.execute(stmt).scalars().all()
        return [
            Comment(
                id=UUID(c.id),
                old_id=c.old_id,
                author=c.author,
                content=json.loads(c.content_json),
                created_at=c.created_at,
                article_id=UUID(c.article_id),
            )
            for c in result
        ]


# ============================================================================
# Taxonomy
# ============================================================================


class TagRepository:
    """Repository for tags. Rows are keyed by unique name."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_name(self, name: str) -> Tag | None:
        """Get a tag by name."""
        db_item = self._get_db_by_name(name)
        return self._to_domain(db_item) if db_item else None

    def get_or_create(self, name: str, slug: str, description: str = "") -> tuple[Tag, bool]:
        """
        Upsert a tag by name. An existing row is returned unchanged.

        Returns:
            The tag and whether it was created.
        """
        existing = self._get_db_by_name(name)
        if existing is not None:
            return self._to_domain(existing), False

        db_item = TagDB(name=name, slug=self._free_slug(slug), description=description)
        try:
            with self.session.begin_nested():
                self.session.add(db_item)
        except IntegrityError:
            # Another invocation inserted the same name first
            existing = self._get_db_by_name(name)
            if existing is None:
                raise
            return self._to_domain(existing), False
        return self._to_domain(db_item), True

    def list_all(self) -> list[Tag]:
        """List all tags by name."""
        stmt = select(TagDB).order_by(TagDB.name)
        return [self._to_domain(t) for t in self.session.execute(stmt).scalars().all()]

    def _free_slug(self, slug: str) -> str:
        candidate = slug
        suffix = 2
        while self.session.execute(
            select(TagDB.id).where(TagDB.slug == candidate)
        ).first() is not None:
            candidate = f"{slug}-{suffix}"
            suffix += 1
        return candidate

    def _get_db_by_name(self, name: str) -> TagDB | None:
        stmt = select(TagDB).where(TagDB.name == name)
        return self.session.execute(stmt).scalar_one_or_none()

    def _to_domain(self, db_item: TagDB) -> Tag:
        return Tag(
            id=UUID(db_item.id),
            name=db_item.name,
            slug=db_item.slug,
            description=db_item.description,
        )


class CategoryRepository:
    """Repository for categories. Rows are keyed by unique name."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_name(self, name: str) -> Category | None:
        """Get a category by name."""
        db_item = self._get_db_by_name(name)
        return self._to_domain(db_item) if db_item else None

    def get_or_create(self, name: str, description: str = "") -> tuple[Category, bool]:
        """
        Upsert a category by name. An existing row is returned unchanged.

        Returns:
            The category and whether it was created.
        """
        existing = self._get_db_by_name(name)
        if existing is not None:
            return self._to_domain(existing), False

        db_item = CategoryDB(name=name, description=description)
        try:
            with self.session.begin_nested():
                self.session.add(db_item)
        except IntegrityError:
            existing = self._get_db_by_name(name)
            if existing is None:
                raise
            return self._to_domain(existing), False
        return self._to_domain(db_item), True

    def list_all(self) -> list[Category]:
        """List all categories by name."""
        stmt = select(CategoryDB).order_by(CategoryDB.name)
        return [self._to_domain(c) for c in self.session.execute(stmt).scalars().all()]

    def _get_db_by_name(self, name: str) -> CategoryDB | None:
        stmt = select(CategoryDB).where(CategoryDB.name == name)
        return self.session.execute(stmt).scalar_one_or_none()

    def _to_domain(self, db_item: CategoryDB) -> Category:
        return Category(
            id=UUID(db_item.id),
            name=db_item.name,
            description=db_item.description,
        )
