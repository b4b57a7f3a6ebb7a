"""Exception taxonomy for the ingestion pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from article_harvester.core.enums import CrawlStatus


class HarvesterError(Exception):
    """Base class for all pipeline errors."""


class TransportError(HarvesterError):
    """Raised when a page could not be fetched."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class ExtractionError(HarvesterError):
    """Raised when a page lacks the structure required for extraction."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason} ({url})")


class ParseError(HarvesterError):
    """Raised when a date or identifier does not match its expected pattern."""

    def __init__(self, value: str, expected: str):
        self.value = value
        self.expected = expected
        super().__init__(f"Could not parse {value!r} as {expected}")


class PersistenceError(HarvesterError):
    """Raised when a storage write or read fails."""


class ClassificationError(HarvesterError):
    """Raised when a taxonomy link does not match the expected URL shape."""

    def __init__(self, href: str):
        self.href = href
        super().__init__(f"No taxonomy slug in {href}")


class InvalidTransitionError(HarvesterError, ValueError):
    """Raised when a link status change is not in the transition table."""

    def __init__(self, href: str, current: CrawlStatus, target: CrawlStatus):
        self.href = href
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot move {href} from {current.name} to {target.name}"
        )
