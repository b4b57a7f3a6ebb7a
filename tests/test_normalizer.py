"""Tests for the URL normalizer module."""

import pytest

from article_harvester.ingestion.normalizer import (
    is_file_link,
    is_same_origin,
    name_from_slug,
    normalize_url,
    slugify,
)
from article_harvester.ingestion.site_config import DEFAULT_FILE_EXTENSIONS

SAMPLE_URLS = [
    "https://thealexandrian.net/wordpress/482/roleplaying-games/three-clue-rule",
    "https://thealexandrian.net/wordpress/482/x?replytocom=12#respond",
    "https://TheAlexandrian.net/tag/node-based-design/page/2",
    "HTTPS://thealexandrian.net",
    "https://thealexandrian.net/?s=dungeon",
    "/relative/path?q=1",
    "mailto:someone@example.com",
    "http://[::1",
    "not a url at all",
    "",
]


class TestNormalizeUrl:
    """Tests for normalize_url."""

    def test_strips_query_and_fragment(self) -> None:
        """Test that query strings and fragments are removed."""
        url = "https://thealexandrian.net/wordpress/482/x?replytocom=12#respond"
        assert normalize_url(url) == "https://thealexandrian.net/wordpress/482/x"

    def test_lowercases_scheme_and_host(self) -> None:
        """Test that scheme and host are lowercased but the path is not."""
        url = "HTTPS://TheAlexandrian.net/Wordpress/1/"
        assert normalize_url(url) == "https://thealexandrian.net/Wordpress/1/"

    def test_empty_path_becomes_root(self) -> None:
        """Test that a bare origin gets a trailing slash."""
        assert normalize_url("https://thealexandrian.net") == "https://thealexandrian.net/"
        assert normalize_url("https://thealexandrian.net/?s=x") == "https://thealexandrian.net/"

    def test_keeps_trailing_slash(self) -> None:
        """Test that paths are otherwise untouched."""
        url = "https://thealexandrian.net/wordpress/482/"
        assert normalize_url(url) == url

    @pytest.mark.parametrize(
        "url", ["http://[::1", "not a url at all", "", "/relative/path?q=1"]
    )
    def test_malformed_input_unchanged(self, url: str) -> None:
        """Test that non-absolute or malformed input is returned unchanged."""
        assert normalize_url(url) == url

    @pytest.mark.parametrize("url", SAMPLE_URLS)
    def test_idempotent(self, url: str) -> None:
        """Test that normalizing twice equals normalizing once."""
        once = normalize_url(url)
        assert normalize_url(once) == once


class TestFileLinks:
    """Tests for is_file_link."""

    @pytest.mark.parametrize(
        "href",
        [
            "https://thealexandrian.net/images/map.jpg",
            "https://thealexandrian.net/images/MAP.PNG",
            "https://thealexandrian.net/files/handout.pdf",
            "https://thealexandrian.net/podcast/episode-3.mp3",
        ],
    )
    def test_binary_resources(self, href: str) -> None:
        """Test that known binary extensions are detected case-insensitively."""
        assert is_file_link(href, DEFAULT_FILE_EXTENSIONS) is True

    def test_pages_are_not_files(self) -> None:
        """Test that ordinary pages are not files."""
        assert is_file_link("https://thealexandrian.net/wordpress/482/x", DEFAULT_FILE_EXTENSIONS) is False
        assert is_file_link("https://thealexandrian.net/jpg-gallery/", DEFAULT_FILE_EXTENSIONS) is False


class TestSameOrigin:
    """Tests for is_same_origin."""

    def test_same_host(self) -> None:
        assert is_same_origin("https://thealexandrian.net/tag/x", "https://thealexandrian.net/")

    def test_host_case_ignored(self) -> None:
        assert is_same_origin("https://TheAlexandrian.net/", "https://thealexandrian.net/")

    def test_other_host_or_scheme(self) -> None:
        assert not is_same_origin("https://example.com/", "https://thealexandrian.net/")
        assert not is_same_origin("http://thealexandrian.net/", "https://thealexandrian.net/")
        assert not is_same_origin("mailto:a@b.c", "https://thealexandrian.net/")


class TestSlugs:
    """Tests for slugify and name_from_slug."""

    def test_slugify(self) -> None:
        """Test slug generation from display names."""
        assert slugify("Node Based Design") == "node-based-design"
        assert slugify("D&D 5th Edition") == "d-d-5th-edition"
        assert slugify("  Gamemastery 101!  ") == "gamemastery-101"

    def test_name_from_slug(self) -> None:
        """Test display names derived from URL slugs."""
        assert name_from_slug("node-based-design") == "Node Based Design"
        assert name_from_slug("rpg") == "Rpg"

    def test_name_from_slug_keeps_inner_case(self) -> None:
        """Test that only the first character of each word changes."""
        assert name_from_slug("dnD-advice") == "DnD Advice"

    def test_name_from_slug_unquotes(self) -> None:
        """Test that percent-encoded slugs are decoded first."""
        assert name_from_slug("d%26d-rules") == "D&D Rules"
