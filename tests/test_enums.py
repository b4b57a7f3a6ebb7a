"""Tests for the link status state machine."""

import pytest

from article_harvester.core.enums import CrawlStatus


class TestCrawlStatus:
    """Tests for CrawlStatus."""

    def test_persisted_values(self) -> None:
        """Test the integers stored in found_links.status."""
        assert [int(s) for s in CrawlStatus] == [0, 1, 2, 4, 5, 6, 7]

    def test_label(self) -> None:
        assert CrawlStatus.ARTICLE.label == "article"

    @pytest.mark.parametrize(
        "current, target",
        [
            (CrawlStatus.PENDING, CrawlStatus.VISITED),
            (CrawlStatus.PENDING, CrawlStatus.ERROR),
            (CrawlStatus.VISITED, CrawlStatus.TAG),
            (CrawlStatus.VISITED, CrawlStatus.CATEGORY),
            (CrawlStatus.VISITED, CrawlStatus.ARTICLE),
            (CrawlStatus.TAG, CrawlStatus.ERROR),
            (CrawlStatus.CATEGORY, CrawlStatus.ERROR),
            (CrawlStatus.ERROR, CrawlStatus.PENDING),
        ],
    )
    def test_allowed_transitions(self, current: CrawlStatus, target: CrawlStatus) -> None:
        assert current.can_transition(target)

    @pytest.mark.parametrize("current", list(CrawlStatus))
    def test_any_status_can_become_file(self, current: CrawlStatus) -> None:
        assert current.can_transition(CrawlStatus.FILE)

    @pytest.mark.parametrize("current", list(CrawlStatus))
    def test_identity_allowed(self, current: CrawlStatus) -> None:
        assert current.can_transition(current)

    @pytest.mark.parametrize(
        "current, target",
        [
            (CrawlStatus.PENDING, CrawlStatus.ARTICLE),
            (CrawlStatus.VISITED, CrawlStatus.PENDING),
            (CrawlStatus.FILE, CrawlStatus.PENDING),
            (CrawlStatus.ARTICLE, CrawlStatus.VISITED),
            (CrawlStatus.ERROR, CrawlStatus.VISITED),
            (CrawlStatus.TAG, CrawlStatus.CATEGORY),
        ],
    )
    def test_rejected_transitions(self, current: CrawlStatus, target: CrawlStatus) -> None:
        assert not current.can_transition(target)
