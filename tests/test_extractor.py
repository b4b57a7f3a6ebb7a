"""Tests for the article page extractor."""

import re
from datetime import UTC, date, datetime

import pytest

from article_harvester.core.errors import ExtractionError, ParseError, TransportError
from article_harvester.ingestion.extractor import ContentExtractor, parse_date, parse_id
from article_harvester.ingestion.site_config import SiteConfig

PAGE_URL = "https://thealexandrian.net/wordpress/482/roleplaying-games/three-clue-rule"

ARTICLE_PAGE = """
<html><body>
<div id="yui-main">
  <div class="first">
    <div class="item entry" id="post-482">
      <div class="itemhead">
        <h3><a href="/wordpress/482/roleplaying-games/three-clue-rule">X</a></h3>
        <div class="chronodata">June 3rd, 2019</div>
      </div>
      <div class="storycontent">
        <p>Body text.</p>
        <img src="/images/one.jpg"/>
        <img src="/images/two.jpg"/>
        <img src="https://cdn.example.com/three.png"/>
        <p><img src="four.gif"/><img src="/images/five.jpg"/></p>
        <div class="yarpp-template-thumbnails">
          <a class="yarpp-thumbnail" href="https://thealexandrian.net/wordpress/100/a">A</a>
          <a class="yarpp-thumbnail" href="https://thealexandrian.net/wordpress/200/b">B</a>
          <a class="yarpp-thumbnail" href="https://thealexandrian.net/about">C</a>
        </div>
      </div>
      <small class="metadata">
        <span class="category"><a href="/category/rpg">Roleplaying Games</a>, <a href="/category/gm">Gamemastery</a></span>
        <span class="tags"><a href="/tag/a">Node Based Design</a> <a href="/tag/b">Mysteries</a> <a href="/tag/c">Clues</a></span>
      </small>
    </div>
  </div>
</div>
<ol class="commentlist">
  <li id="comment-1001"><cite>Alice</cite><div><small><a href="#c1">June 4th, 2019 - 10:15 am</a></small></div><p>First.</p><p>Second paragraph.</p></li>
  <li id="comment-1002"><cite>Bob</cite><div><small><a href="#c2">June 5th, 2019 - 3:02 pm</a></small></div><p>Agreed.</p></li>
  <li id="comment-1003"><cite>Carol</cite><div><small><a href="#c3">July 1st, 2019 - 9:00 am</a></small></div><p>Hmm.</p></li>
  <li id="trackback"><cite>Dave</cite><div><small><a href="#c4">not a date</a></small></div><p>Pingback.</p></li>
</ol>
</body></html>
"""


@pytest.fixture
def extractor(site_config: SiteConfig, make_fetcher) -> ContentExtractor:
    fetcher = make_fetcher(pages={PAGE_URL: ARTICLE_PAGE})
    return ContentExtractor(fetcher=fetcher, config=site_config)


class TestParseId:
    """Tests for parse_id."""

    def test_numeric(self) -> None:
        assert parse_id("post-482", re.compile(r"post-(\d+)")) == 482

    def test_missing_or_non_numeric(self) -> None:
        pattern = re.compile(r"post-(\d+)")
        assert parse_id(None, pattern) is None
        assert parse_id("", pattern) is None
        assert parse_id("post-abc", pattern) is None


class TestParseDate:
    """Tests for parse_date."""

    def test_article_date(self) -> None:
        parsed = parse_date("June 3rd, 2019", "Month Dth, YYYY")
        assert parsed == datetime(2019, 6, 3, tzinfo=UTC)

    def test_comment_date(self) -> None:
        parsed = parse_date(
            "August 21st, 2011 - 3:02 pm", "Month Dth, YYYY - h:mm am", with_time=True
        )
        assert parsed == datetime(2011, 8, 21, 15, 2, tzinfo=UTC)

    def test_invalid(self) -> None:
        with pytest.raises(ParseError):
            parse_date("not a date", "Month Dth, YYYY")
        with pytest.raises(ParseError):
            parse_date("", "Month Dth, YYYY")

    @pytest.mark.parametrize("value", ["June 2019", "June 3rd", "2019", "3rd, 2019"])
    def test_partial_date_rejected(self, value: str) -> None:
        with pytest.raises(ParseError):
            parse_date(value, "Month Dth, YYYY")

    def test_comment_date_requires_time(self) -> None:
        with pytest.raises(ParseError):
            parse_date("August 21st, 2011", "Month Dth, YYYY - h:mm am", with_time=True)


class TestContentExtractor:
    """Tests for ContentExtractor."""

    def test_parse_article(self, extractor: ContentExtractor) -> None:
        article = extractor.parse(ARTICLE_PAGE, PAGE_URL).article

        assert article.old_id == 482
        assert article.title == "X"
        assert article.link == PAGE_URL
        assert article.created_at.date() == date(2019, 6, 3)
        assert article.categories == ["Roleplaying Games", "Gamemastery"]
        assert article.tags == ["Node Based Design", "Mysteries", "Clues"]

    def test_images_resolved_against_page(self, extractor: ContentExtractor) -> None:
        article = extractor.parse(ARTICLE_PAGE, PAGE_URL).article

        assert len(article.images) == 5
        assert article.images[0] == "https://thealexandrian.net/images/one.jpg"
        assert "https://cdn.example.com/three.png" in article.images
        assert (
            "https://thealexandrian.net/wordpress/482/roleplaying-games/four.gif"
            in article.images
        )

    def test_related_block_harvested_and_removed(self, extractor: ContentExtractor) -> None:
        article = extractor.parse(ARTICLE_PAGE, PAGE_URL).article

        assert article.related_ids == [100, 200, None]
        assert "yarpp" not in article.content
        assert "<p>Body text.</p>" in article.content

    def test_related_links_outside_story_harvested(self, extractor: ContentExtractor) -> None:
        html = ARTICLE_PAGE.replace(
            '<ol class="commentlist">',
            '<div id="sidebar"><a class="yarpp-thumbnail" '
            'href="https://thealexandrian.net/wordpress/300/c">C</a></div>\n'
            '<ol class="commentlist">',
        )
        extraction = extractor.parse(html, PAGE_URL)

        assert extraction.article.related_ids == [100, 200, None, 300]
        assert len(extraction.comments) == 4

    def test_related_links_without_story(self, extractor: ContentExtractor) -> None:
        html = (
            '<div id="yui-main"><div class="first"><div class="item entry" id="post-7">'
            '<div class="itemhead"><h3><a href="/x">Bare</a></h3></div>'
            "</div></div></div>"
            '<a class="yarpp-thumbnail" href="/wordpress/8/y">Y</a>'
        )
        article = extractor.parse(html, PAGE_URL).article
        assert article.related_ids == [8]
        assert article.content == ""

    def test_comments(self, extractor: ContentExtractor) -> None:
        extraction = extractor.parse(ARTICLE_PAGE, PAGE_URL)
        comments = extraction.comments

        assert len(comments) == 4
        assert extraction.article.comment_ids == [1001, 1002, 1003, None]
        assert comments[0].author == "Alice"
        assert comments[0].content == ["First.", "Second paragraph."]
        assert comments[0].created_at == datetime(2019, 6, 4, 10, 15, tzinfo=UTC)

    def test_unparseable_comment_date_falls_back_to_now(self, extractor: ContentExtractor) -> None:
        before = datetime.now(UTC)
        comments = extractor.parse(ARTICLE_PAGE, PAGE_URL).comments
        assert comments[3].created_at >= before

    def test_missing_container(self, extractor: ContentExtractor) -> None:
        with pytest.raises(ExtractionError) as exc_info:
            extractor.parse("<html><body><p>Not an article</p></body></html>", PAGE_URL)
        assert exc_info.value.url == PAGE_URL

    def test_missing_date_falls_back_to_now(self, extractor: ContentExtractor) -> None:
        html = ARTICLE_PAGE.replace("June 3rd, 2019", "sometime")
        before = datetime.now(UTC)
        article = extractor.parse(html, PAGE_URL).article
        assert article.created_at >= before

    def test_partial_date_falls_back_to_now(self, extractor: ContentExtractor) -> None:
        html = ARTICLE_PAGE.replace("June 3rd, 2019", "June 2019")
        before = datetime.now(UTC)
        article = extractor.parse(html, PAGE_URL).article
        assert article.created_at >= before

    def test_minimal_entry(self, extractor: ContentExtractor) -> None:
        """Test that an entry without story, metadata or id still parses."""
        html = (
            '<div id="yui-main"><div class="first"><div class="item entry">'
            '<div class="itemhead"><h3><a href="/x">Bare</a></h3></div>'
            "</div></div></div>"
        )
        extraction = extractor.parse(html, PAGE_URL)
        assert extraction.article.old_id is None
        assert extraction.article.title == "Bare"
        assert extraction.article.content == ""
        assert extraction.article.images == []
        assert extraction.comments == []

    @pytest.mark.asyncio
    async def test_extract_fetches_page(self, extractor: ContentExtractor) -> None:
        extraction = await extractor.extract(PAGE_URL)
        assert extraction.article.old_id == 482
        assert extractor.fetcher.requested == [PAGE_URL]

    @pytest.mark.asyncio
    async def test_extract_propagates_transport_errors(self, extractor: ContentExtractor) -> None:
        with pytest.raises(TransportError):
            await extractor.extract("https://thealexandrian.net/wordpress/404/missing")
