"""Shared fixtures for Article Harvester tests."""

import tempfile
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from article_harvester.core.errors import TransportError
from article_harvester.db.models import Base
from article_harvester.ingestion.site_config import SiteConfig

ORIGIN = "https://thealexandrian.net/"


class FakeFetcher:
    """Serves canned pages and records every requested URL."""

    def __init__(self, pages: dict[str, str] | None = None, failing: set[str] | None = None):
        self.pages = pages or {}
        self.failing = failing or set()
        self.requested: list[str] = []

    async def fetch_text(self, url: str) -> str:
        self.requested.append(url)
        if url in self.failing or url not in self.pages:
            raise TransportError(url, "HTTP 404")
        return self.pages[url]


@pytest.fixture
def temp_db_path():
    """Create a temporary database file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def engine(temp_db_path):
    """Create a test database engine."""
    url = f"sqlite:///{temp_db_path}"
    engine = create_engine(url, echo=False)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine) -> Session:
    """Create a database session for testing."""
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def site_config() -> SiteConfig:
    """Site configuration without request delays."""
    return SiteConfig(origin=ORIGIN, request_delay_ms=0)


@pytest.fixture
def make_fetcher():
    """Factory for fetchers serving canned pages."""
    return FakeFetcher
