"""Read-only routes for stored articles and taxonomy."""

import math

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from article_harvester.db.engine import get_session
from article_harvester.db.repositories import (
    ArticleRepository,
    CategoryRepository,
    CommentRepository,
    TagRepository,
)

router = APIRouter(prefix="/api", tags=["articles"])

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 50


@router.get("/articles")
async def list_articles(page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> JSONResponse:
    """
    List articles, newest first.

    ``page`` is clamped to at least 1 and ``limit`` to 1..50.
    """
    page = max(1, page)
    limit = min(MAX_PAGE_SIZE, max(1, limit))

    with get_session() as session:
        repo = ArticleRepository(session)
        total = repo.count()
        articles = repo.list_recent(limit=limit, offset=(page - 1) * limit)

    total_pages = math.ceil(total / limit)
    return JSONResponse({
        "data": [a.model_dump(mode="json") for a in articles],
        "meta": {
            "total": total,
            "page": page,
            "totalPages": total_pages,
            "hasMore": page < total_pages,
        },
    })


@router.get("/articles/{article_id}")
async def get_article(article_id: str) -> JSONResponse:
    """Get one article with its comments."""
    with get_session() as session:
        article = ArticleRepository(session).get_by_id(article_id)
        if article is None:
            raise HTTPException(status_code=404, detail="Article not found")
        comments = CommentRepository(session).list_for_article(article.id)

    data = article.model_dump(mode="json")
    data["comments"] = [c.model_dump(mode="json") for c in comments]
    return JSONResponse({"data": data})


@router.get("/tags")
async def list_tags() -> JSONResponse:
    """List all tags."""
    with get_session() as session:
        tags = TagRepository(session).list_all()

    return JSONResponse({"data": [t.model_dump(mode="json") for t in tags]})


@router.get("/categories")
async def list_categories() -> JSONResponse:
    """List all categories."""
    with get_session() as session:
        categories = CategoryRepository(session).list_all()

    return JSONResponse({"data": [c.model_dump(mode="json") for c in categories]})
