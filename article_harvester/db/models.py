"""SQLAlchemy ORM models for Article Harvester.

These models define the persisted schema:
- LinkDB (crawl frontier and link status)
- ArticleDB, CommentDB (extracted content)
- TagDB, CategoryDB (taxonomy)
- ArticleTagDB, ArticleCategoryDB (junction tables)

List-valued columns are stored as JSON text so the schema works on SQLite
as well as PostgreSQL.
"""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


def _generate_uuid() -> str:
    """Generate a UUID string."""
    return str(uuid4())


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# ============================================================================
# Crawl State
# ============================================================================


class LinkDB(Base):
    """
    Database model for discovered links.

    ``status`` holds a CrawlStatus value; ``processed_at`` is only set once
    the link's article has been fully ingested.
    """

    __tablename__ = "found_links"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_generate_uuid)
    href: Mapped[str] = mapped_column(String(2048), nullable=False, unique=True, index=True)
    status: Mapped[int] = mapped_column(Integer, default=0, index=True)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now, index=True)

    def __repr__(self) -> str:
        return f"<LinkDB(href='{self.href}', status={self.status})>"


# ============================================================================
# Content
# ============================================================================


class ArticleDB(Base):
    """Database model for ingested articles."""

    __tablename__ = "articles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_generate_uuid)
    old_id: Mapped[int | None] = mapped_column(Integer, nullable=True, unique=True)
    title: Mapped[str] = mapped_column(String(500), default="")
    content: Mapped[str] = mapped_column(Text, default="")
    link: Mapped[str] = mapped_column(String(2048), nullable=False, unique=True, index=True)
    images_json: Mapped[str] = mapped_column(Text, default="[]")  # JSON array
    related_json: Mapped[str] = mapped_column(Text, default="[]")  # JSON array of old ids
    # Written by the enhancement stage, never by ingestion
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now, index=True)

    # Relationships
    comments: Mapped[list["CommentDB"]] = relationship(
        "CommentDB", back_populates="article", cascade="all, delete-orphan"
    )
    tag_links: Mapped[list["ArticleTagDB"]] = relationship(
        "ArticleTagDB", back_populates="article", cascade="all, delete-orphan"
    )
    category_links: Mapped[list["ArticleCategoryDB"]] = relationship(
        "ArticleCategoryDB", back_populates="article", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<ArticleDB(id={self.id}, title='{self.title[:40]}')>"


class CommentDB(Base):
    """Database model for article comments."""

    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_generate_uuid)
    old_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    author: Mapped[str] = mapped_column(String(255), default="")
    content_json: Mapped[str] = mapped_column(Text, default="[]")  # JSON array of paragraphs
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    article_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True
    )

    article: Mapped["ArticleDB"] = relationship("ArticleDB", back_populates="comments")

    def __repr__(self) -> str:
        return f"<CommentDB(id={self.id}, author='{self.author}')>"


# ============================================================================
# Taxonomy
# ============================================================================


class TagDB(Base):
    """Database model for tags."""

    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, default="")

    def __repr__(self) -> str:
        return f"<TagDB(name='{self.name}')>"


class CategoryDB(Base):
    """Database model for categories."""

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    description: Mapped[str] = mapped_column(Text, default="")

    def __repr__(self) -> str:
        return f"<CategoryDB(name='{self.name}')>"


class ArticleTagDB(Base):
    """Junction table between articles and tags."""

    __tablename__ = "article_tags"

    article_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("articles.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True
    )

    article: Mapped["ArticleDB"] = relationship("ArticleDB", back_populates="tag_links")
    tag: Mapped["TagDB"] = relationship("TagDB")


class ArticleCategoryDB(Base):
    """Junction table between articles and categories."""

    __tablename__ = "article_categories"

    article_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("articles.id", ondelete="CASCADE"), primary_key=True
    )
    category_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True
    )

    article: Mapped["ArticleDB"] = relationship("ArticleDB", back_populates="category_links")
    category: Mapped["CategoryDB"] = relationship("CategoryDB")
