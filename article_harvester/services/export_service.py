"""Export service for the crawl link table (JSON)."""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from sqlalchemy.orm import Session

from article_harvester.core.enums import CrawlStatus
from article_harvester.core.schema import LinkRecord
from article_harvester.db.repositories import LinkRepository


def _link_to_dict(link: LinkRecord) -> dict[str, Any]:
    return {
        "id": str(link.id),
        "href": link.href,
        "status": link.status.label,
        "status_code": int(link.status),
        "processed_at": link.processed_at.isoformat() if link.processed_at else None,
        "created_at": link.created_at.isoformat(),
    }


class LinkExportService:
    """Service for exporting discovered links."""

    def __init__(self, session: Session):
        """
        Initialize the export service.

        Args:
            session: SQLAlchemy database session.
        """
        self.session = session
        self.link_repo = LinkRepository(session)

    def export_links(self, status: CrawlStatus | None = None) -> list[dict[str, Any]]:
        """
        Export link records as plain dictionaries.

        Args:
            status: Optional status filter.

        Returns:
            One dictionary per link, in discovery order.
        """
        if status is None:
            links = self.link_repo.list_all()
        else:
            links = self.link_repo.list_by_status(status)
        return [_link_to_dict(link) for link in links]

    def export_links_json(self, status: CrawlStatus | None = None) -> str:
        """
        Export links as a JSON document.

        Returns:
            JSON string.
        """
        return self._dump(self.export_links(status))

    def write_links_json(self, path: Path | str, status: CrawlStatus | None = None) -> int:
        """
        Write the JSON export to a file.

        Returns:
            Number of links written.
        """
        links = self.export_links(status)
        Path(path).write_text(self._dump(links), encoding="utf-8")
        return len(links)

    def _dump(self, links: list[dict[str, Any]]) -> str:
        return json.dumps(
            {
                "export_version": "1.0",
                "export_date": datetime.now(UTC).isoformat(),
                "count": len(links),
                "links": links,
            },
            indent=2,
        )
