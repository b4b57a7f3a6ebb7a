"""Enums for link crawl state and ingestion results."""

from enum import Enum, IntEnum


class CrawlStatus(IntEnum):
    """
    Status of a discovered link.

    Values are the integers persisted in ``found_links.status``.
    """

    PENDING = 0
    VISITED = 1
    ERROR = 2
    FILE = 4
    TAG = 5
    CATEGORY = 6
    ARTICLE = 7

    @property
    def label(self) -> str:
        """Lowercase name used in API payloads and exports."""
        return self.name.lower()

    def can_transition(self, target: "CrawlStatus") -> bool:
        """Check whether moving from this status to ``target`` is allowed."""
        if target == self or target == CrawlStatus.FILE:
            return True
        return target in _TRANSITIONS[self]


# FILE is reachable from every state and handled in can_transition.
_TRANSITIONS: dict[CrawlStatus, frozenset[CrawlStatus]] = {
    CrawlStatus.PENDING: frozenset({CrawlStatus.VISITED, CrawlStatus.ERROR}),
    CrawlStatus.VISITED: frozenset(
        {CrawlStatus.TAG, CrawlStatus.CATEGORY, CrawlStatus.ARTICLE}
    ),
    # Manual reset only
    CrawlStatus.ERROR: frozenset({CrawlStatus.PENDING}),
    CrawlStatus.FILE: frozenset(),
    CrawlStatus.TAG: frozenset({CrawlStatus.ERROR}),
    CrawlStatus.CATEGORY: frozenset({CrawlStatus.ERROR}),
    CrawlStatus.ARTICLE: frozenset(),
}


class ResultStatus(str, Enum):
    """Outcome of ingesting a single link."""

    SUCCESS = "success"
    ERROR = "error"


class TaxonomyKind(str, Enum):
    """The two taxonomy tables."""

    TAG = "tag"
    CATEGORY = "category"
