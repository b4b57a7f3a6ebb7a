"""Initial schema for Article Harvester.

Revision ID: 0001
Revises:
Create Date: 2025-06-01

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create found_links table
    op.create_table(
        "found_links",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("href", sa.String(2048), nullable=False),
        sa.Column("status", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("processed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_found_links_href", "found_links", ["href"], unique=True)
    op.create_index("ix_found_links_status", "found_links", ["status"])
    op.create_index("ix_found_links_created_at", "found_links", ["created_at"])

    # Create articles table
    op.create_table(
        "articles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("old_id", sa.Integer(), nullable=True, unique=True),
        sa.Column("title", sa.String(500), default=""),
        sa.Column("content", sa.Text(), default=""),
        sa.Column("link", sa.String(2048), nullable=False),
        sa.Column("images_json", sa.Text(), default="[]"),
        sa.Column("related_json", sa.Text(), default="[]"),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_articles_link", "articles", ["link"], unique=True)
    op.create_index("ix_articles_created_at", "articles", ["created_at"])

    # Create taxonomy tables
    op.create_table(
        "tags",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False, unique=True),
        sa.Column("description", sa.Text(), default=""),
    )
    op.create_index("ix_tags_name", "tags", ["name"], unique=True)

    op.create_table(
        "categories",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), default=""),
    )
    op.create_index("ix_categories_name", "categories", ["name"], unique=True)

    # Create junction tables
    op.create_table(
        "article_tags",
        sa.Column(
            "article_id",
            sa.String(36),
            sa.ForeignKey("articles.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "tag_id",
            sa.String(36),
            sa.ForeignKey("tags.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    op.create_table(
        "article_categories",
        sa.Column(
            "article_id",
            sa.String(36),
            sa.ForeignKey("articles.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "category_id",
            sa.String(36),
            sa.ForeignKey("categories.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    # Create comments table
    op.create_table(
        "comments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("old_id", sa.Integer(), nullable=True),
        sa.Column("author", sa.String(255), default=""),
        sa.Column("content_json", sa.Text(), default="[]"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column(
            "article_id",
            sa.String(36),
            sa.ForeignKey("articles.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    op.create_index("ix_comments_article_id", "comments", ["article_id"])


def downgrade() -> None:
    op.drop_index("ix_comments_article_id", table_name="comments")
    op.drop_table("comments")

    op.drop_table("article_categories")
    op.drop_table("article_tags")

    op.drop_index("ix_categories_name", table_name="categories")
    op.drop_table("categories")
    op.drop_index("ix_tags_name", table_name="tags")
    op.drop_table("tags")

    op.drop_index("ix_articles_created_at", table_name="articles")
    op.drop_index("ix_articles_link", table_name="articles")
    op.drop_table("articles")

    op.drop_index("ix_found_links_created_at", table_name="found_links")
    op.drop_index("ix_found_links_status", table_name="found_links")
    op.drop_index("ix_found_links_href", table_name="found_links")
    op.drop_table("found_links")
