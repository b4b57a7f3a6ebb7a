"""
Page Fetcher Module
===================

Provides rate-limited HTTP fetching of the origin's pages and extraction
of same-origin anchor links from fetched documents.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol
from urllib.parse import urljoin

import httpx

from article_harvester.core.errors import TransportError
from article_harvester.ingestion.html import parse_html
from article_harvester.ingestion.normalizer import is_same_origin, normalize_url

if TYPE_CHECKING:
    from article_harvester.ingestion.site_config import SiteConfig

logger = logging.getLogger(__name__)


class PageFetcher(Protocol):
    """Anything that can turn a URL into document text."""

    async def fetch_text(self, url: str) -> str:
        """Fetch a page, raising TransportError on failure."""
        ...


@dataclass
class FetchResult:
    """Result of fetching a URL."""

    url: str
    text: str
    status_code: int
    fetched_at: datetime
    error: str | None = None

    @property
    def success(self) -> bool:
        """Check if fetch was successful."""
        return self.error is None and 200 <= self.status_code < 300


class FixedDelay:
    """Fixed pause issued before every request."""

    def __init__(self, delay_ms: int) -> None:
        self.delay_seconds = max(0, delay_ms) / 1000

    async def wait(self) -> None:
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)


class Fetcher:
    """
    HTTP fetcher for the crawled origin.

    Features:
    - Fixed inter-request delay
    - Configurable timeout and retry count
    - Non-2xx responses reported as failures
    """

    def __init__(
        self,
        user_agent: str = "ArticleHarvester/0.1",
        timeout: float = 30.0,
        max_retries: int = 1,
        delay_ms: int = 1000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self._delay = FixedDelay(delay_ms)
        self._transport = transport

    @classmethod
    def from_config(
        cls, config: SiteConfig, transport: httpx.AsyncBaseTransport | None = None
    ) -> Fetcher:
        """Create a fetcher from site configuration."""
        return cls(
            user_agent=config.user_agent,
            timeout=config.request_timeout,
            max_retries=config.max_retries,
            delay_ms=config.request_delay_ms,
            transport=transport,
        )

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch a URL after the configured delay.

        Args:
            url: URL to fetch

        Returns:
            FetchResult with document text or error
        """
        fetched_at = datetime.now(UTC)
        await self._delay.wait()

        last_error: str | None = None
        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout, transport=self._transport
                ) as client:
                    response = await client.get(
                        url,
                        headers={"User-Agent": self.user_agent},
                        follow_redirects=True,
                    )

                result = FetchResult(
                    url=url,
                    text=response.text,
                    status_code=response.status_code,
                    fetched_at=fetched_at,
                )
                if not result.success:
                    result.error = f"HTTP {response.status_code}"
                return result

            except httpx.TimeoutException:
                last_error = f"Timeout after {self.timeout}s"
                logger.warning(f"Timeout fetching {url} (attempt {attempt + 1}/{self.max_retries})")
            except httpx.HTTPError as e:
                last_error = str(e) or e.__class__.__name__
                logger.warning(f"HTTP error fetching {url}: {e} (attempt {attempt + 1}/{self.max_retries})")

            # Wait before retry with exponential backoff
            if attempt < self.max_retries - 1:
                await asyncio.sleep(2**attempt)

        return FetchResult(
            url=url,
            text="",
            status_code=0,
            fetched_at=fetched_at,
            error=last_error or "Unknown error",
        )

    async def fetch_text(self, url: str) -> str:
        """
        Fetch a URL and return its text.

        Raises:
            TransportError: If the request failed or returned a non-2xx status.
        """
        result = await self.fetch(url)
        if not result.success:
            raise TransportError(url, result.error or "Unknown error")
        return result.text


def extract_links(html: str, page_url: str, origin: str) -> list[str]:
    """
    Collect same-origin anchor targets from a document.

    Relative hrefs are resolved against ``page_url``; every target is
    normalized and duplicates are dropped, keeping document order.

    Args:
        html: Document text
        page_url: URL the document was fetched from
        origin: Origin whose links are kept

    Returns:
        Normalized same-origin URLs
    """
    document = parse_html(html)
    found: dict[str, None] = {}
    external = 0

    for anchor in document.query_all("a[href]"):
        href = (anchor.attr("href") or "").strip()
        if not href:
            continue

        absolute = normalize_url(urljoin(page_url, href))
        if not is_same_origin(absolute, origin):
            external += 1
            continue
        found.setdefault(absolute, None)

    logger.debug(f"{page_url}: {len(found)} internal links, {external} external skipped")
    return list(found)
