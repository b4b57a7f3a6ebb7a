"""Pydantic v2 models for Article Harvester.

These models define the pipeline's domain objects:
- LinkRecord (crawl state)
- ExtractedArticle, ExtractedComment (scraper output, before persistence)
- Article, Tag, Category, Comment (persisted content)
- IngestResult, BatchReport, SingleLinkOutcome, CrawlSummary (run reports)
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from article_harvester.core.enums import CrawlStatus, ResultStatus


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


# ============================================================================
# Crawl State
# ============================================================================


class LinkRecord(BaseModel):
    """A discovered link and its position in the crawl state machine."""

    id: UUID = Field(default_factory=uuid4)
    href: str
    status: CrawlStatus = CrawlStatus.PENDING
    processed_at: datetime | None = None
    created_at: datetime = Field(default_factory=_utc_now)

    @field_validator("href")
    @classmethod
    def href_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("href cannot be empty")
        return v.strip()


# ============================================================================
# Extraction Output
# ============================================================================


class ExtractedComment(BaseModel):
    """A reader comment parsed from an article page."""

    old_id: int | None = None
    author: str = ""
    content: list[str] = Field(default_factory=list)
    created_at: datetime


class ExtractedArticle(BaseModel):
    """
    An article parsed from its page.

    Categories and tags are display names; they are resolved to rows
    during ingestion. ``None`` in ``old_id``, ``comment_ids`` or
    ``related_ids`` means the identifier was absent or unparseable.
    """

    old_id: int | None = None
    title: str = ""
    link: str = ""
    content: str = ""
    images: list[str] = Field(default_factory=list)
    created_at: datetime
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    comment_ids: list[int | None] = Field(default_factory=list)
    related_ids: list[int | None] = Field(default_factory=list)


# ============================================================================
# Persisted Content
# ============================================================================


class Tag(BaseModel):
    """A tag row."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    slug: str
    description: str = ""


class Category(BaseModel):
    """A category row."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    description: str = ""


class Comment(BaseModel):
    """A persisted comment belonging to an article."""

    id: UUID = Field(default_factory=uuid4)
    old_id: int | None = None
    author: str = ""
    content: list[str] = Field(default_factory=list)
    created_at: datetime
    article_id: UUID


class Article(BaseModel):
    """A persisted article with its resolved taxonomy names."""

    id: UUID = Field(default_factory=uuid4)
    old_id: int | None = None
    title: str = ""
    content: str = ""
    link: str
    images: list[str] = Field(default_factory=list)
    related_ids: list[int] = Field(default_factory=list)
    summary: str | None = None
    created_at: datetime
    tags: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)


# ============================================================================
# Run Reports
# ============================================================================


class IngestResult(BaseModel):
    """Per-link outcome reported by the batch runner."""

    url: str
    status: ResultStatus
    error: str | None = None


class BatchReport(BaseModel):
    """Outcome of a batch ingestion run."""

    processed: int = 0
    results: list[IngestResult] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.status == ResultStatus.SUCCESS)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == ResultStatus.ERROR)


class SingleLinkOutcome(BaseModel):
    """Outcome of a single-link ingestion run."""

    message: str
    link: str | None = None


class CrawlSummary(BaseModel):
    """Outcome of a discovery crawl."""

    discovered: int = 0
    visited: int = 0
    errors: int = 0
    files: int = 0
    links: list[str] = Field(default_factory=list)


class MaintenanceReport(BaseModel):
    """Rows touched by a maintenance pass."""

    duplicates_deleted: int = 0
    unnormalized_deleted: int = 0
    files_marked: int = 0
