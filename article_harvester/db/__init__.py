"""Database initialization and persistence layer."""

from article_harvester.db.engine import (
    create_db_engine,
    get_database_url,
    get_engine,
    get_session,
    get_session_factory,
    init_db,
    reset_engine,
)
from article_harvester.db.models import (
    ArticleCategoryDB,
    ArticleDB,
    ArticleTagDB,
    Base,
    CategoryDB,
    CommentDB,
    LinkDB,
    TagDB,
)
from article_harvester.db.repositories import (
    ArticleRepository,
    CategoryRepository,
    CommentRepository,
    LinkRepository,
    TagRepository,
)

__all__ = [
    # Engine
    "create_db_engine",
    "get_database_url",
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_db",
    "reset_engine",
    # Models
    "Base",
    "LinkDB",
    "ArticleDB",
    "CommentDB",
    "TagDB",
    "CategoryDB",
    "ArticleTagDB",
    "ArticleCategoryDB",
    # Repositories
    "LinkRepository",
    "ArticleRepository",
    "CommentRepository",
    "TagRepository",
    "CategoryRepository",
]
