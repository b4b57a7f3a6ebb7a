"""
Content Extractor Module
========================

Parses a single article page of the origin's WordPress theme into an
ExtractedArticle plus its comments.

Page anatomy relied on:
- ``#yui-main .first .item.entry`` is the article container; its ``id``
  attribute is ``post-<old id>``. A page without it is not an article.
- ``.itemhead h3 a`` holds the title and permalink,
  ``.itemhead .chronodata`` the publish date ("June 3rd, 2019").
- ``.storycontent`` is the body. Related-post ids come from every
  ``.yarpp-thumbnail`` link on the page; the related-posts block inside
  the body (``.yarpp-template-thumbnails``) is then removed.
- ``small.metadata`` lists category and tag links.
- ``.commentlist li`` are the comments, dated "June 3rd, 2019 - 10:15 am".

Identifiers that are missing or not numeric are reported as ``None``.
Unparseable dates fall back to the current time.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from urllib.parse import urljoin

from dateutil import parser as date_parser

from article_harvester.core.errors import ExtractionError, ParseError
from article_harvester.core.schema import ExtractedArticle, ExtractedComment
from article_harvester.ingestion.crawler import Fetcher, PageFetcher
from article_harvester.ingestion.html import HtmlNode, parse_html
from article_harvester.ingestion.site_config import SiteConfig, get_default_config

logger = logging.getLogger(__name__)

_ORDINAL_SUFFIX = re.compile(r"(?<=\d)(st|nd|rd|th)\b", re.IGNORECASE)

# Two fill-in dates: a field that comes out differently was missing from the text
_FILL_INS = (datetime(2000, 1, 1, 0, 0), datetime(2001, 2, 2, 1, 1))
_DATE_FIELDS = ("year", "month", "day")
_TIME_FIELDS = ("hour", "minute")


@dataclass
class Extraction:
    """An article and its comments, as parsed from one page."""

    article: ExtractedArticle
    comments: list[ExtractedComment] = field(default_factory=list)


def parse_id(value: str | None, pattern: re.Pattern[str]) -> int | None:
    """Read the first numeric group of ``pattern`` from ``value``."""
    if not value:
        return None
    match = pattern.search(value)
    if match is None:
        return None
    try:
        return int(match.group(1))
    except (IndexError, ValueError):
        return None


def parse_date(value: str, expected: str, with_time: bool = False) -> datetime:
    """
    Parse a long-form date such as "June 3rd, 2019" or
    "June 3rd, 2019 - 10:15 am".

    Year, month and day must all be present, and hour and minute too
    when ``with_time`` is set. Nothing is filled in from today.

    Raises:
        ParseError: If the text is not a complete date.
    """
    cleaned = _ORDINAL_SUFFIX.sub("", value.replace(" - ", " ")).strip()
    if not cleaned:
        raise ParseError(value, expected)
    try:
        parsed, check = (date_parser.parse(cleaned, default=fill) for fill in _FILL_INS)
    except (ValueError, OverflowError) as e:
        raise ParseError(value, expected) from e

    fields = _DATE_FIELDS + _TIME_FIELDS if with_time else _DATE_FIELDS
    if any(getattr(parsed, name) != getattr(check, name) for name in fields):
        raise ParseError(value, expected)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def date_or_now(value: str, expected: str, url: str, with_time: bool = False) -> datetime:
    """Parse a date, falling back to the current time on failure."""
    try:
        return parse_date(value, expected, with_time=with_time)
    except ParseError as e:
        logger.warning(f"{e} on {url}, using current time")
        return datetime.now(UTC)


class ContentExtractor:
    """Fetches and parses article pages."""

    CONTAINER = "#yui-main .first .item.entry"
    TITLE = ".itemhead h3 a"
    DATE = ".itemhead .chronodata"
    STORY = ".storycontent"
    RELATED_BLOCK = ".yarpp-template-thumbnails"
    RELATED_LINK = ".yarpp-thumbnail"
    METADATA = "small.metadata"
    CATEGORY_LINKS = ".category a"
    TAG_LINKS = ".tags a"
    COMMENTS = ".commentlist li"

    ARTICLE_DATE_FORMAT = "Month Dth, YYYY"
    COMMENT_DATE_FORMAT = "Month Dth, YYYY - h:mm am"

    POST_ID = re.compile(r"post-(\d+)")
    COMMENT_ID = re.compile(r"comment-(\d+)")
    RELATED_ID = re.compile(r"wordpress/(\d+)/")

    def __init__(
        self,
        fetcher: PageFetcher | None = None,
        config: SiteConfig | None = None,
    ) -> None:
        self.config = config or get_default_config()
        self.fetcher = fetcher or Fetcher.from_config(self.config)

    async def extract(self, url: str) -> Extraction:
        """
        Fetch and parse an article page.

        Raises:
            TransportError: If the page could not be fetched.
            ExtractionError: If the page has no article container.
        """
        html = await self.fetcher.fetch_text(url)
        return self.parse(html, url)

    def parse(self, html: str, url: str) -> Extraction:
        """
        Parse article page markup.

        Args:
            html: Page markup
            url: Page URL, used to resolve relative links

        Raises:
            ExtractionError: If the page has no article container.
        """
        document = parse_html(html)
        entry = document.query_one(self.CONTAINER)
        if entry is None:
            raise ExtractionError(url, "Article container not found")

        old_id = parse_id(entry.attr("id"), self.POST_ID)
        if old_id is None:
            logger.warning(f"No numeric post id on {url}")

        title_el = entry.query_one(self.TITLE)
        title = title_el.text().strip() if title_el else ""
        href = title_el.attr("href") if title_el else None
        link = urljoin(url, href) if href else ""

        date_el = entry.query_one(self.DATE)
        created_at = date_or_now(
            date_el.text().strip() if date_el else "", self.ARTICLE_DATE_FORMAT, url
        )

        related_ids = [
            parse_id(a.attr("href"), self.RELATED_ID)
            for a in document.query_all(self.RELATED_LINK)
        ]
        content, images = self._story(entry, url)
        categories, tags = self._taxonomy(entry)
        comments = self._comments(document, url)

        article = ExtractedArticle(
            old_id=old_id,
            title=title,
            link=link,
            content=content,
            images=images,
            created_at=created_at,
            categories=categories,
            tags=tags,
            comment_ids=[c.old_id for c in comments],
            related_ids=related_ids,
        )
        logger.debug(
            f"Parsed {url}: post {old_id}, {len(images)} images, {len(comments)} comments"
        )
        return Extraction(article=article, comments=comments)

    def _story(self, entry: HtmlNode, url: str) -> tuple[str, list[str]]:
        story = entry.query_one(self.STORY)
        if story is None:
            return "", []

        related_block = story.query_one(self.RELATED_BLOCK)
        if related_block is not None:
            related_block.remove()

        images = [
            urljoin(url, src)
            for src in (img.attr("src") for img in story.query_all("img"))
            if src
        ]
        return story.inner_html().strip(), images

    def _taxonomy(self, entry: HtmlNode) -> tuple[list[str], list[str]]:
        metadata = entry.query_one(self.METADATA)
        if metadata is None:
            return [], []
        categories = [a.text().strip() for a in metadata.query_all(self.CATEGORY_LINKS)]
        tags = [a.text().strip() for a in metadata.query_all(self.TAG_LINKS)]
        return [c for c in categories if c], [t for t in tags if t]

    def _comments(self, document: HtmlNode, url: str) -> list[ExtractedComment]:
        comments = []
        for li in document.query_all(self.COMMENTS):
            author_el = li.query_one("cite")
            paragraphs = [p.text().strip() for p in li.query_all("p")]
            date_el = li.query_one("div small a")

            comments.append(
                ExtractedComment(
                    old_id=parse_id(li.attr("id"), self.COMMENT_ID),
                    author=author_el.text().strip() if author_el else "",
                    content=[p for p in paragraphs if p],
                    created_at=date_or_now(
                        date_el.text().strip() if date_el else "",
                        self.COMMENT_DATE_FORMAT,
                        url,
                        with_time=True,
                    ),
                )
            )
        return comments
