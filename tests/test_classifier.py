"""Tests for the post-visit link classifier."""

import pytest
from sqlalchemy.orm import Session

from article_harvester.core.enums import CrawlStatus
from article_harvester.db.repositories import LinkRepository
from article_harvester.ingestion.classifier import LinkClassifier
from article_harvester.ingestion.site_config import SiteConfig


class TestClassifyHref:
    """Tests for LinkClassifier.classify_href."""

    @pytest.fixture
    def classifier(self, session: Session, site_config: SiteConfig) -> LinkClassifier:
        return LinkClassifier(session, config=site_config)

    @pytest.mark.parametrize(
        "href, expected",
        [
            ("https://thealexandrian.net/wordpress/482/roleplaying-games/three-clue-rule", CrawlStatus.ARTICLE),
            ("https://thealexandrian.net/tag/node-based-design", CrawlStatus.TAG),
            ("https://thealexandrian.net/tag/node-based-design/page/2", CrawlStatus.TAG),
            ("https://thealexandrian.net/category/gamemastery", CrawlStatus.CATEGORY),
            ("https://thealexandrian.net/wordpress/wp-content/uploads/map.jpg", CrawlStatus.FILE),
        ],
    )
    def test_shapes(self, classifier: LinkClassifier, href: str, expected: CrawlStatus) -> None:
        assert classifier.classify_href(href) == expected

    def test_unknown_shape(self, classifier: LinkClassifier) -> None:
        assert classifier.classify_href("https://thealexandrian.net/about") is None

    def test_precedence(self, classifier: LinkClassifier) -> None:
        """Test that earlier shapes win when several match."""
        assert classifier.classify_href("https://thealexandrian.net/tag/maps/cover.png") == CrawlStatus.FILE
        assert classifier.classify_href("https://thealexandrian.net/tag/x/category/y") == CrawlStatus.TAG
        assert (
            classifier.classify_href("https://thealexandrian.net/category/essays/wordpress/12/")
            == CrawlStatus.CATEGORY
        )


class TestLinkClassifierRun:
    """Tests for LinkClassifier.run."""

    def test_only_visited_links_are_classified(self, session: Session, site_config: SiteConfig) -> None:
        repo = LinkRepository(session)
        repo.create("https://thealexandrian.net/wordpress/1/a", CrawlStatus.VISITED)
        repo.create("https://thealexandrian.net/tag/rpg", CrawlStatus.VISITED)
        repo.create("https://thealexandrian.net/about", CrawlStatus.VISITED)
        repo.create("https://thealexandrian.net/wordpress/2/b")  # still pending
        session.commit()

        counts = LinkClassifier(session, config=site_config).run()

        assert counts == {CrawlStatus.ARTICLE: 1, CrawlStatus.TAG: 1}
        assert repo.get_by_href("https://thealexandrian.net/about").status == CrawlStatus.VISITED
        assert repo.get_by_href("https://thealexandrian.net/wordpress/2/b").status == CrawlStatus.PENDING

    def test_rerun_is_noop(self, session: Session, site_config: SiteConfig) -> None:
        repo = LinkRepository(session)
        repo.create("https://thealexandrian.net/category/essays", CrawlStatus.VISITED)
        session.commit()

        classifier = LinkClassifier(session, config=site_config)
        classifier.run()
        assert classifier.run() == {}
