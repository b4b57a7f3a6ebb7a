"""Tests for the page fetcher and anchor extraction."""

from datetime import UTC, datetime

import httpx
import pytest

from article_harvester.core.errors import TransportError
from article_harvester.ingestion.crawler import Fetcher, FetchResult, FixedDelay, extract_links

ORIGIN = "https://thealexandrian.net/"


def _fetcher(handler, **kwargs) -> Fetcher:
    return Fetcher(delay_ms=0, transport=httpx.MockTransport(handler), **kwargs)


class TestFetchResult:
    """Tests for the FetchResult dataclass."""

    def test_success(self) -> None:
        result = FetchResult(url=ORIGIN, text="<html/>", status_code=200, fetched_at=datetime.now(UTC))
        assert result.success is True

    def test_failure_status(self) -> None:
        result = FetchResult(url=ORIGIN, text="", status_code=404, fetched_at=datetime.now(UTC))
        assert result.success is False

    def test_failure_error(self) -> None:
        result = FetchResult(
            url=ORIGIN, text="", status_code=0, fetched_at=datetime.now(UTC), error="Timeout"
        )
        assert result.success is False


class TestFixedDelay:
    """Tests for the inter-request delay."""

    def test_delay_in_seconds(self) -> None:
        assert FixedDelay(1000).delay_seconds == 1.0
        assert FixedDelay(-5).delay_seconds == 0

    @pytest.mark.asyncio
    async def test_wait_sleeps(self, monkeypatch) -> None:
        """Test that every wait sleeps for the configured delay."""
        slept = []

        async def fake_sleep(seconds: float) -> None:
            slept.append(seconds)

        monkeypatch.setattr("article_harvester.ingestion.crawler.asyncio.sleep", fake_sleep)
        delay = FixedDelay(250)
        await delay.wait()
        await delay.wait()
        assert slept == [0.25, 0.25]


class TestFetcher:
    """Tests for the Fetcher class."""

    @pytest.mark.asyncio
    async def test_fetch_text(self) -> None:
        """Test a successful fetch sends the user agent."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["ua"] = request.headers["User-Agent"]
            return httpx.Response(200, text="<html>ok</html>")

        fetcher = _fetcher(handler, user_agent="TestBot/1.0")
        assert await fetcher.fetch_text(ORIGIN) == "<html>ok</html>"
        assert seen["ua"] == "TestBot/1.0"

    @pytest.mark.asyncio
    async def test_non_2xx_raises_transport_error(self) -> None:
        fetcher = _fetcher(lambda request: httpx.Response(503))
        with pytest.raises(TransportError) as exc_info:
            await fetcher.fetch_text(ORIGIN)
        assert exc_info.value.url == ORIGIN
        assert "503" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        """Test that transport failures are reported, not raised, by fetch."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = await _fetcher(handler).fetch(ORIGIN)
        assert result.success is False
        assert "connection refused" in result.error

    @pytest.mark.asyncio
    async def test_retries(self, monkeypatch) -> None:
        """Test that a failed attempt is retried up to max_retries."""
        calls = []

        async def fake_sleep(seconds: float) -> None:
            pass

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url)
            if len(calls) == 1:
                raise httpx.ReadTimeout("slow", request=request)
            return httpx.Response(200, text="second time")

        monkeypatch.setattr("article_harvester.ingestion.crawler.asyncio.sleep", fake_sleep)
        fetcher = _fetcher(handler, max_retries=2)
        assert await fetcher.fetch_text(ORIGIN) == "second time"
        assert len(calls) == 2


class TestExtractLinks:
    """Tests for extract_links."""

    def test_same_origin_normalized_and_deduplicated(self) -> None:
        html = """
        <html><body>
          <a href="https://thealexandrian.net/wordpress/482/x#comments">A</a>
          <a href="/wordpress/482/x?replytocom=3">A again</a>
          <a href="tag/node-based-design">Relative</a>
          <a href="https://example.com/elsewhere">External</a>
          <a href="mailto:someone@example.com">Mail</a>
          <a href="">Empty</a>
          <a>No href</a>
        </body></html>
        """
        links = extract_links(html, "https://thealexandrian.net/category/gamemastery/", ORIGIN)
        assert links == [
            "https://thealexandrian.net/wordpress/482/x",
            "https://thealexandrian.net/category/gamemastery/tag/node-based-design",
        ]

    def test_no_anchors(self) -> None:
        assert extract_links("<p>Nothing here</p>", ORIGIN, ORIGIN) == []
